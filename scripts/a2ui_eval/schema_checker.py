"""JSON Schema conformance checking for single server-to-client messages.

The checker owns one jsonschema validator bound to a referencing.Registry that
holds every configured schema document, so cross-document $refs (e.g. the
message schema pointing at the component catalog) resolve without network
access.

Design decisions:
    - Schemas are registered under their configured name and, when present,
      their $id.
    - A missing root schema disables schema checking (warning at
      construction) instead of failing the batch.
    - An invalid root schema raises SchemaConfigError at construction: that
      is a configuration error, caught before any item is checked.
    - check() never raises for malformed input.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.validators import validator_for
from referencing import Registry, Resource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT202012

from a2ui_eval.types import ErrorLayer, ValidationIssue

logger = logging.getLogger(__name__)

ROOT_SCHEMA_ID = "https://a2ui.dev/specification/0.9/server_to_client.json"


class SchemaConfigError(Exception):
    """Raised when the configured root schema is not a valid JSON Schema."""


def _pointer(error: ValidationError) -> str:
    parts = [str(p).replace("~", "~0").replace("/", "~1") for p in error.absolute_path]
    return "/" + "/".join(parts)


def _path_key(error: ValidationError) -> list[tuple[bool, Any]]:
    return [(isinstance(p, int), p) for p in error.absolute_path]


def build_registry(schemas: Mapping[str, Any]) -> Registry:
    """Register every schema under its name and its $id."""
    resources: list[tuple[str, Resource]] = []
    for name, contents in schemas.items():
        resource = Resource.from_contents(contents, default_specification=DRAFT202012)
        resources.append((name, resource))
        schema_id = contents.get("$id") if isinstance(contents, dict) else None
        if schema_id and schema_id != name:
            resources.append((schema_id, resource))
    return Registry().with_resources(resources).crawl()


class SchemaConformanceChecker:
    """Validates single messages against the root server-to-client schema.

    Usage:
        checker = SchemaConformanceChecker(load_schemas(schema_dir))
        for issue in checker.check(message):
            print(issue)
    """

    def __init__(
        self,
        schemas: Mapping[str, Any],
        root_schema_id: str = ROOT_SCHEMA_ID,
    ) -> None:
        self._root_schema_id = root_schema_id
        self._registry = build_registry(schemas)
        self._validator: Any = None

        root = self._find_root(schemas)
        if root is None:
            logger.warning(
                "Root schema %r not found among %d configured schema(s); "
                "schema conformance checks are disabled.",
                root_schema_id,
                len(schemas),
            )
            return

        cls = validator_for(root, default=Draft202012Validator)
        try:
            cls.check_schema(root)
        except SchemaError as e:
            raise SchemaConfigError(
                f"Root schema {root_schema_id!r} is not a valid JSON Schema: "
                f"{e.message}. Fix the schema document before validating."
            ) from e
        self._validator = cls(root, registry=self._registry)

    def _find_root(self, schemas: Mapping[str, Any]) -> dict[str, Any] | None:
        for name, contents in schemas.items():
            if not isinstance(contents, dict):
                continue
            if name == self._root_schema_id or contents.get("$id") == self._root_schema_id:
                return contents
        return None

    @property
    def is_enabled(self) -> bool:
        return self._validator is not None

    def check(self, message: Any) -> list[ValidationIssue]:
        """Validate one message; empty list means it conforms."""
        if self._validator is None:
            return []
        try:
            errors = sorted(self._validator.iter_errors(message), key=_path_key)
        except Unresolvable as e:
            logger.warning("Unresolvable schema reference while checking message: %s", e)
            return []
        return [
            ValidationIssue(
                layer=ErrorLayer.SCHEMA,
                location=_pointer(error),
                message=error.message,
            )
            for error in errors
        ]
