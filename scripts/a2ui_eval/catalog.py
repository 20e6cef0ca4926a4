"""Component catalog: per-type reference and bound-value rules.

COMPONENT_RULES maps a component type tag (props.component) to a
ComponentRule. Adding a component type means adding one entry here; the
semantic validator never branches on type names itself.

Reference extractors return (property name, referenced value) pairs. Absent
or empty references are not returned. Values are returned as found, so a
non-string reference reaches the validator and is reported there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

RefExtractor = Callable[[dict[str, Any]], list[tuple[str, Any]]]


@dataclass(frozen=True)
class ComponentRule:
    """How to check one component type.

    references: extracts the component ids this component points at.
    bound_values: props that hold a BoundValue (literal or {"path": ...}).
    """

    references: RefExtractor
    bound_values: tuple[str, ...] = ()


# ─── Reference extractors ─────────────────────────────────────────────────────


def _present(name: str, value: Any) -> list[tuple[str, Any]]:
    if value is None or value == "":
        return []
    return [(name, value)]


def no_references(props: dict[str, Any]) -> list[tuple[str, Any]]:
    return []


def children_references(props: dict[str, Any]) -> list[tuple[str, Any]]:
    """Row/Column/List: an explicit id list or a {componentId} template."""
    children = props.get("children")
    if isinstance(children, list):
        refs: list[tuple[str, Any]] = []
        for child in children:
            refs.extend(_present("children", child))
        return refs
    if isinstance(children, dict):
        return _present("children.componentId", children.get("componentId"))
    return []


def child_reference(props: dict[str, Any]) -> list[tuple[str, Any]]:
    return _present("child", props.get("child"))


def tab_item_references(props: dict[str, Any]) -> list[tuple[str, Any]]:
    tab_items = props.get("tabItems")
    if not isinstance(tab_items, list):
        return []
    refs: list[tuple[str, Any]] = []
    for i, tab in enumerate(tab_items):
        if isinstance(tab, dict):
            refs.extend(_present(f"tabItems[{i}].child", tab.get("child")))
    return refs


def modal_references(props: dict[str, Any]) -> list[tuple[str, Any]]:
    return _present("entryPointChild", props.get("entryPointChild")) + _present(
        "contentChild", props.get("contentChild")
    )


# ─── Registry ─────────────────────────────────────────────────────────────────


COMPONENT_RULES: dict[str, ComponentRule] = {
    # Containers
    "Row": ComponentRule(children_references),
    "Column": ComponentRule(children_references),
    "List": ComponentRule(children_references),
    "Card": ComponentRule(child_reference),
    "Tabs": ComponentRule(tab_item_references),
    "Modal": ComponentRule(modal_references),
    # Interactive
    "Button": ComponentRule(child_reference),
    "TextField": ComponentRule(no_references, ("label", "text")),
    "CheckBox": ComponentRule(no_references, ("label", "value")),
    "Slider": ComponentRule(no_references, ("value",)),
    "DateTimeInput": ComponentRule(no_references, ("value",)),
    "MultipleChoice": ComponentRule(no_references, ("selections",)),
    # Display
    "Text": ComponentRule(no_references, ("text",)),
    "Image": ComponentRule(no_references, ("url",)),
    "Icon": ComponentRule(no_references, ("name",)),
    "Video": ComponentRule(no_references, ("url",)),
    "AudioPlayer": ComponentRule(no_references, ("url", "description")),
    "Divider": ComponentRule(no_references),
}
