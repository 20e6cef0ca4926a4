"""A2UI conformance checker — public API.

Validates batches of generated A2UI server-to-client message sets in two
phases: JSON Schema conformance per message, then semantic/referential
integrity over the whole message sequence.

Public API (re-exported from submodules):

Enums:
    ErrorLayer     — SCHEMA, STRUCTURAL, REFERENTIAL, SEMANTIC
    IssueSeverity  — minor, significant, critical, criticalSchema
    MessageKind    — updateComponents, updateDataModel, deleteSurface

Frozen Dataclasses:
    ValidationIssue   — one error: layer, message, location
    PromptRef         — prompt name (+ optional description)
    GenerationResult  — one upstream attempt (components or error)
    ValidatedResult   — GenerationResult + ordered issues
    BatchSummary      — passed / failed / skipped tally
    ComponentRule     — reference extractor + bound-value props for a type

Message model (from messages.py):
    UpdateComponents, UpdateDataModel, DeleteSurface, UnknownMessage
    decode_message(raw) — raw mapping → tagged union variant

Checkers:
    SchemaConformanceChecker — JSON Schema check of one message
    SemanticValidator        — protocol rules over a message sequence
    ResultAggregator         — batch driver, index-aligned output
    FailureReporter          — YAML failure documents for failed items

Loading (from loader.py):
    load_schemas(schema_dir), load_batch(path)
    SchemaLoadError, BatchLoadError

Canonical lookups:
    COMPONENT_RULES — dict[str, ComponentRule] keyed by component type tag
    ROOT_SCHEMA_ID  — $id of the root server-to-client schema
"""

from a2ui_eval.aggregator import ResultAggregator
from a2ui_eval.catalog import COMPONENT_RULES, ComponentRule
from a2ui_eval.loader import (
    BatchLoadError,
    SchemaLoadError,
    load_batch,
    load_schemas,
)
from a2ui_eval.messages import (
    DeleteSurface,
    MessageKind,
    UnknownMessage,
    UpdateComponents,
    UpdateDataModel,
    decode_message,
)
from a2ui_eval.reporter import FailureReporter
from a2ui_eval.schema_checker import (
    ROOT_SCHEMA_ID,
    SchemaConfigError,
    SchemaConformanceChecker,
)
from a2ui_eval.semantic import SemanticValidator
from a2ui_eval.types import (
    BatchSummary,
    ErrorLayer,
    GenerationResult,
    IssueSeverity,
    PromptRef,
    ValidatedResult,
    ValidationIssue,
)

__all__ = [
    # Enums
    "ErrorLayer",
    "IssueSeverity",
    "MessageKind",
    # Frozen dataclasses
    "ValidationIssue",
    "PromptRef",
    "GenerationResult",
    "ValidatedResult",
    "BatchSummary",
    "ComponentRule",
    # Message model
    "UpdateComponents",
    "UpdateDataModel",
    "DeleteSurface",
    "UnknownMessage",
    "decode_message",
    # Checkers
    "SchemaConformanceChecker",
    "SchemaConfigError",
    "SemanticValidator",
    "ResultAggregator",
    "FailureReporter",
    # Loading
    "load_schemas",
    "load_batch",
    "SchemaLoadError",
    "BatchLoadError",
    # Canonical lookups
    "COMPONENT_RULES",
    "ROOT_SCHEMA_ID",
]
