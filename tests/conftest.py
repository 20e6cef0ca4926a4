"""Shared pytest fixtures and helpers for the a2ui_eval test suite.

Provides:
- Module-level helpers (_update_components, _component, _record) importable
  directly by any test module that builds message sets inline.
- _MESSAGE_FIXTURE: MessageFixture singleton for mutation-driven tests.

pytest fixtures:
    message_fixture  — MessageFixture singleton (YAML-driven test data)
    valid_messages   — fresh deep copy of the valid message set
    schemas          — schema documents from tests/fixtures/schemas
    schema_checker   — SchemaConformanceChecker over those schemas
    validator        — default SemanticValidator
"""

from __future__ import annotations

from typing import Any

import pytest

from a2ui_eval.loader import load_schemas
from a2ui_eval.schema_checker import SchemaConformanceChecker
from a2ui_eval.semantic import SemanticValidator
from a2ui_eval.types import GenerationResult

# Import after production imports so pythonpath=scripts:tests resolves fixtures/
from fixtures.fixture_loader import SCHEMA_DIR, MessageFixture


_MESSAGE_FIXTURE = MessageFixture()


# ─── Module-Level Helpers ─────────────────────────────────────────────────────


def _component(component_id: str, component_type: str, **props: Any) -> dict[str, Any]:
    """Return a component mapping: {"id": ..., "props": {"component": ..., **props}}."""
    return {"id": component_id, "props": {"component": component_type, **props}}


def _update_components(*components: dict[str, Any], surface_id: str = "main") -> dict[str, Any]:
    """Wrap components in an updateComponents message."""
    return {"updateComponents": {"surfaceId": surface_id, "components": list(components)}}


def _record(
    components: list[Any] | None = None,
    *,
    model_name: str = "gemini/flash-2.5",
    prompt_name: str = "login-form",
    run_number: int = 1,
    error: str | None = None,
) -> GenerationResult:
    """Build a GenerationResult through its wire shape."""
    data: dict[str, Any] = {
        "modelName": model_name,
        "prompt": {"name": prompt_name},
        "runNumber": run_number,
    }
    if components is not None:
        data["components"] = components
    if error is not None:
        data["error"] = error
    return GenerationResult.from_dict(data)


# ─── pytest Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def message_fixture() -> MessageFixture:
    return _MESSAGE_FIXTURE


@pytest.fixture
def valid_messages() -> list[Any]:
    return _MESSAGE_FIXTURE.fresh_messages()


@pytest.fixture
def schemas() -> dict[str, dict[str, Any]]:
    return load_schemas(SCHEMA_DIR)


@pytest.fixture
def schema_checker(schemas: dict[str, dict[str, Any]]) -> SchemaConformanceChecker:
    return SchemaConformanceChecker(schemas)


@pytest.fixture
def validator() -> SemanticValidator:
    return SemanticValidator()
