"""Semantic validation of a server-to-client message sequence.

Checks the protocol rules a JSON Schema cannot express:

    Structural   — message-type dispatch, required fields, allowed field sets,
                   component id uniqueness within one updateComponents message
    Referential  — every child/reference id resolves within the same message
    Semantic     — a component with id "root" exists whenever any
                   updateComponents message does; bound values are literals
                   or single-key {"path": ...} objects

Never short-circuits: a malformed message or component contributes its own
errors and checking continues with the next one.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from a2ui_eval.catalog import COMPONENT_RULES, ComponentRule
from a2ui_eval.messages import (
    DeleteSurface,
    UnknownMessage,
    UpdateComponents,
    UpdateDataModel,
    decode_message,
)
from a2ui_eval.types import ErrorLayer, ValidationIssue

ROOT_COMPONENT_ID = "root"

MISSING_ROOT_MESSAGE = (
    "Missing root component: At least one 'updateComponents' message must "
    "contain a component with id: 'root'."
)


def _issue(layer: ErrorLayer, message: str) -> ValidationIssue:
    return ValidationIssue(layer=layer, message=message)


def _dump(value: Any) -> str:
    return json.dumps(value, default=repr)


def check_bound_value(
    value: Any,
    prop_name: str,
    component_id: str,
    component_type: str,
) -> ValidationIssue | None:
    """Return an issue if value is not a literal, an array or {"path": ...}."""
    if isinstance(value, (str, int, float, bool, list)):
        return None
    prefix = f"Component '{component_id}' of type '{component_type}' property '{prop_name}'"
    if not isinstance(value, dict):
        return _issue(
            ErrorLayer.SEMANTIC,
            f"{prefix} must be a primitive or an object.",
        )
    keys = list(value)
    if keys != ["path"]:
        return _issue(
            ErrorLayer.SEMANTIC,
            f"{prefix} object must have exactly one key: 'path'. "
            f"Found: {', '.join(str(k) for k in keys)}",
        )
    return None


class SemanticValidator:
    """Validates decoded message sequences.

    Dependency injection:
        Pass a custom component_rules mapping to check an extended catalog.
        Defaults to COMPONENT_RULES from catalog.py.
    """

    def __init__(self, component_rules: dict[str, ComponentRule] | None = None) -> None:
        self._rules: dict[str, ComponentRule] = (
            component_rules if component_rules is not None else COMPONENT_RULES
        )

    def validate(self, messages: Sequence[Any]) -> list[ValidationIssue]:
        """Validate a whole message sequence; empty list means it passes."""
        issues: list[ValidationIssue] = []
        saw_update_components = False
        saw_root_component = False

        for raw in messages:
            message = decode_message(raw)
            if isinstance(message, UpdateComponents):
                saw_update_components = True
                if self._check_update_components(message.body, issues):
                    saw_root_component = True
            elif isinstance(message, UpdateDataModel):
                self._check_update_data_model(message.body, issues)
            elif isinstance(message, DeleteSurface):
                self._check_delete_surface(message.body, issues)
            elif isinstance(message, UnknownMessage):
                issues.append(
                    _issue(
                        ErrorLayer.STRUCTURAL,
                        f"Unknown message type in output: {_dump(message.raw)}",
                    )
                )

        if saw_update_components and not saw_root_component:
            issues.append(_issue(ErrorLayer.SEMANTIC, MISSING_ROOT_MESSAGE))
        return issues

    # ── Message variants ──────────────────────────────────────────────────────

    def _check_update_components(
        self, body: dict[str, Any], issues: list[ValidationIssue]
    ) -> bool:
        """Check one updateComponents body. Returns True if it declares root."""
        if "surfaceId" not in body:
            issues.append(
                _issue(ErrorLayer.STRUCTURAL, "UpdateComponents must have a 'surfaceId' property.")
            )
        components = body.get("components")
        if not isinstance(components, list):
            issues.append(
                _issue(ErrorLayer.STRUCTURAL, "UpdateComponents must have a 'components' array.")
            )
            return False

        declared: set[str] = set()
        for component in components:
            if not isinstance(component, dict):
                continue
            cid = component.get("id")
            if not isinstance(cid, str) or not cid:
                continue
            if cid in declared:
                issues.append(
                    _issue(ErrorLayer.STRUCTURAL, f"Duplicate component ID found: {cid}")
                )
            declared.add(cid)

        for index, component in enumerate(components):
            self._check_component(component, index, declared, issues)

        return ROOT_COMPONENT_ID in declared

    def _check_update_data_model(
        self, body: dict[str, Any], issues: list[ValidationIssue]
    ) -> None:
        if "surfaceId" not in body:
            issues.append(
                _issue(ErrorLayer.STRUCTURAL, "UpdateDataModel must have a 'surfaceId' property.")
            )
        for key in body:
            if key not in UpdateDataModel.ALLOWED_KEYS:
                issues.append(
                    _issue(ErrorLayer.STRUCTURAL, f"UpdateDataModel has unexpected property: {key}")
                )
        if not isinstance(body.get("contents"), dict):
            issues.append(
                _issue(
                    ErrorLayer.STRUCTURAL,
                    "UpdateDataModel 'contents' property must be an object.",
                )
            )

    def _check_delete_surface(
        self, body: dict[str, Any], issues: list[ValidationIssue]
    ) -> None:
        if "surfaceId" not in body:
            issues.append(
                _issue(ErrorLayer.STRUCTURAL, "DeleteSurface must have a 'surfaceId' property.")
            )
        for key in body:
            if key not in DeleteSurface.ALLOWED_KEYS:
                issues.append(
                    _issue(ErrorLayer.STRUCTURAL, f"DeleteSurface has unexpected property: {key}")
                )

    # ── Components ────────────────────────────────────────────────────────────

    def _check_component(
        self,
        component: Any,
        index: int,
        declared: set[str],
        issues: list[ValidationIssue],
    ) -> None:
        if not isinstance(component, dict):
            issues.append(
                _issue(ErrorLayer.STRUCTURAL, f"Component at index {index} must be an object.")
            )
            return

        cid = component.get("id")
        if cid is None or cid == "":
            issues.append(_issue(ErrorLayer.STRUCTURAL, "Component is missing an 'id'."))
            label = f"#{index}"
        elif not isinstance(cid, str):
            issues.append(
                _issue(
                    ErrorLayer.STRUCTURAL,
                    f"Component at index {index} has a non-string 'id': {_dump(cid)}",
                )
            )
            label = f"#{index}"
        else:
            label = cid

        props = component.get("props")
        if not isinstance(props, dict):
            issues.append(
                _issue(ErrorLayer.STRUCTURAL, f"Component '{label}' is missing 'props' object.")
            )
            return

        component_type = props.get("component")
        if not isinstance(component_type, str) or not component_type:
            issues.append(
                _issue(
                    ErrorLayer.STRUCTURAL,
                    f"Component '{label}' is missing 'component' property in 'props'.",
                )
            )
            return

        rule = self._rules.get(component_type)
        if rule is None:
            return

        for prop_name, ref in rule.references(props):
            if not isinstance(ref, str):
                issues.append(
                    _issue(
                        ErrorLayer.REFERENTIAL,
                        f"Component '{label}' property '{prop_name}' has an invalid "
                        f"component reference: {_dump(ref)}",
                    )
                )
            elif ref not in declared:
                issues.append(
                    _issue(
                        ErrorLayer.REFERENTIAL,
                        f"Component '{label}' property '{prop_name}' references "
                        f"non-existent component ID {_dump(ref)}.",
                    )
                )

        for prop_name in rule.bound_values:
            if prop_name not in props:
                continue
            issue = check_bound_value(props[prop_name], prop_name, label, component_type)
            if issue is not None:
                issues.append(issue)
