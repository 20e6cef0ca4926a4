"""Load schema documents and generation batches from disk.

Public API:
    SchemaLoadError — schema directory missing or a document unreadable
    BatchLoadError  — batch file missing, malformed, or a record incomplete
    load_schemas(schema_dir) → dict[str, dict]  (keyed by file name)
    load_batch(path)         → list[GenerationResult]

Schema documents may be JSON (*.json) or YAML (*.yaml, *.yml). Batches may
be a JSON array, JSON Lines (*.jsonl), or a YAML list. YAML is read with
JsonCompatibleLoader, which keeps date-like scalars as strings.

Errors are actionable: the message says what failed, where, and how to fix
it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from a2ui_eval.types import GenerationResult

SCHEMA_SUFFIXES = (".json", ".yaml", ".yml")


class SchemaLoadError(Exception):
    """Raised when the schema directory or one of its documents cannot be loaded."""


class BatchLoadError(Exception):
    """Raised when a batch file cannot be loaded into GenerationResults."""


class JsonCompatibleLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamp-like scalars (2024-01-01) as strings.

    Untagged scalars then resolve to the same types json would give, so
    a YAML batch validates and re-serializes like its JSON encoding.
    """


JsonCompatibleLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _load_yaml(stream: Any) -> Any:
    return yaml.load(stream, Loader=JsonCompatibleLoader)


# ─── Schemas ──────────────────────────────────────────────────────────────────


def _read_document(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        if path.suffix == ".json":
            return json.load(f)
        return _load_yaml(f)


def load_schemas(schema_dir: str | Path) -> dict[str, dict[str, Any]]:
    """Load every schema document in schema_dir, keyed by file name."""
    schema_dir = Path(schema_dir)
    if not schema_dir.is_dir():
        raise SchemaLoadError(
            f"Schema directory not found: {schema_dir}. "
            f"Fix: pass --schema-dir or set A2UI_EVAL_SCHEMA_DIR."
        )
    schemas: dict[str, dict[str, Any]] = {}
    for path in sorted(schema_dir.iterdir()):
        if path.suffix not in SCHEMA_SUFFIXES or not path.is_file():
            continue
        try:
            contents = _read_document(path)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(f"Could not parse schema {path}: {e}") from e
        if not isinstance(contents, dict):
            raise SchemaLoadError(
                f"Schema {path} must contain a JSON object, "
                f"got {type(contents).__name__}."
            )
        schemas[path.name] = contents
    return schemas


# ─── Batches ──────────────────────────────────────────────────────────────────


def _read_records(path: Path) -> list[Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        records = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise BatchLoadError(f"{path}:{lineno}: invalid JSON: {e}") from e
        return records

    try:
        data = json.loads(text) if path.suffix == ".json" else _load_yaml(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise BatchLoadError(f"Could not parse batch {path}: {e}") from e
    if not isinstance(data, list):
        raise BatchLoadError(
            f"Batch {path} must contain a list of generation results, "
            f"got {type(data).__name__}."
        )
    return data


def load_batch(path: str | Path) -> list[GenerationResult]:
    """Load a batch file into an ordered list of GenerationResults."""
    path = Path(path)
    if not path.is_file():
        raise BatchLoadError(f"Batch file not found: {path}")
    try:
        records = _read_records(path)
    except OSError as e:
        raise BatchLoadError(f"Could not read batch {path}: {e}") from e

    results: list[GenerationResult] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise BatchLoadError(f"{path}: record {index} is not an object.")
        try:
            results.append(GenerationResult.from_dict(record))
        except KeyError as e:
            raise BatchLoadError(
                f"{path}: record {index} is missing required field {e}. "
                f"Each record needs modelName, prompt.name and runNumber."
            ) from e
        except (TypeError, ValueError) as e:
            raise BatchLoadError(f"{path}: record {index} is malformed: {e}") from e
    return results
