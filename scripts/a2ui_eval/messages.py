"""Server-to-client message model.

A raw message is a mapping with exactly one variant tag whose value is the
variant body:

    {"updateComponents": {"surfaceId": ..., "components": [...]}}
    {"updateDataModel":  {"surfaceId": ..., "path": ..., "contents": {...}}}
    {"deleteSurface":    {"surfaceId": ...}}

decode_message() turns a raw value into one of the variant dataclasses below.
Anything that is not a mapping, carries no known tag, carries more than one,
or whose tag value is not a mapping decodes to UnknownMessage.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class MessageKind(str, Enum):
    """Wire tags of the three known message variants."""

    UPDATE_COMPONENTS = "updateComponents"
    UPDATE_DATA_MODEL = "updateDataModel"
    DELETE_SURFACE = "deleteSurface"


@dataclass(frozen=True)
class UpdateComponents:
    body: dict[str, Any]

    kind = MessageKind.UPDATE_COMPONENTS


@dataclass(frozen=True)
class UpdateDataModel:
    body: dict[str, Any]

    kind = MessageKind.UPDATE_DATA_MODEL

    ALLOWED_KEYS = frozenset({"surfaceId", "path", "contents"})


@dataclass(frozen=True)
class DeleteSurface:
    body: dict[str, Any]

    kind = MessageKind.DELETE_SURFACE

    ALLOWED_KEYS = frozenset({"surfaceId"})


@dataclass(frozen=True)
class UnknownMessage:
    """A value matching none, or more than one, of the known tags."""

    raw: Any


Message = Union[UpdateComponents, UpdateDataModel, DeleteSurface, UnknownMessage]

_VARIANTS: dict[str, type[UpdateComponents] | type[UpdateDataModel] | type[DeleteSurface]] = {
    MessageKind.UPDATE_COMPONENTS.value: UpdateComponents,
    MessageKind.UPDATE_DATA_MODEL.value: UpdateDataModel,
    MessageKind.DELETE_SURFACE.value: DeleteSurface,
}


def decode_message(raw: Any) -> Message:
    if not isinstance(raw, dict):
        return UnknownMessage(raw)
    tags = [tag for tag in _VARIANTS if tag in raw]
    if len(tags) != 1:
        return UnknownMessage(raw)
    body = raw[tags[0]]
    if not isinstance(body, dict):
        return UnknownMessage(raw)
    return _VARIANTS[tags[0]](body)
