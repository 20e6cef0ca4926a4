"""Type definitions for the A2UI conformance checker.

All enums are str Enums so they serialize directly into JSON and YAML reports.
All record dataclasses are frozen: a GenerationResult is consumed exactly once
and a ValidatedResult is terminal.

Wire shape of a generation record (camelCase, as produced upstream):

    {
        "modelName": "provider/model",
        "prompt": {"name": "login-form", ...},
        "runNumber": 1,
        "components": [ <server-to-client message>, ... ],   # or
        "error": "timeout"
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ─── Enums ────────────────────────────────────────────────────────────────────


class ErrorLayer(str, Enum):
    """Which validation layer produced an issue."""

    SCHEMA = "Schema Conformance"
    STRUCTURAL = "Structural"
    REFERENTIAL = "Referential Integrity"
    SEMANTIC = "Semantic"


class IssueSeverity(str, Enum):
    """Severity labels used in persisted failure documents.

    Validation failures are always reported as CRITICAL_SCHEMA; the other
    labels belong to downstream scoring.
    """

    MINOR = "minor"
    SIGNIFICANT = "significant"
    CRITICAL = "critical"
    CRITICAL_SCHEMA = "criticalSchema"


# ─── Issues ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation error.

    str(issue) is the flat, human-readable error string: "<location> <message>"
    for schema issues, the bare message for semantic ones.
    """

    layer: ErrorLayer
    message: str
    location: str = ""

    def __str__(self) -> str:
        if self.location:
            return f"{self.location} {self.message}"
        return self.message


# ─── Records ──────────────────────────────────────────────────────────────────


def _run_number(value: Any) -> int:
    """Coerce a wire runNumber to int, refusing values that would truncate."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"'runNumber' must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class PromptRef:
    """The prompt a generation was produced for.

    extra holds every other prompt field (e.g. promptText) as received.
    """

    name: str
    description: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = frozenset({"name", "description"})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptRef:
        return cls(
            name=str(data["name"]),
            description=data.get("description"),
            extra={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class GenerationResult:
    """One upstream generation attempt.

    Exactly one of components / error is normally set; a record carrying
    neither never reaches validation. Fields this checker does not interpret
    are kept in extra and written back by to_dict().
    """

    model_name: str
    prompt: PromptRef
    run_number: int
    components: list[Any] | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = frozenset({"modelName", "prompt", "runNumber", "components", "error"})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationResult:
        """Build a GenerationResult from its camelCase wire mapping.

        Raises:
            KeyError: modelName, prompt.name or runNumber is missing.
            TypeError: prompt is not a mapping.
            ValueError: runNumber is not an integer.
        """
        prompt = data["prompt"]
        if not isinstance(prompt, dict):
            raise TypeError(f"'prompt' must be a mapping, got {type(prompt).__name__}")
        error = data.get("error")
        return cls(
            model_name=str(data["modelName"]),
            prompt=PromptRef.from_dict(prompt),
            run_number=_run_number(data["runNumber"]),
            components=data.get("components"),
            error=None if error is None else str(error),
            extra={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "modelName": self.model_name,
            "prompt": self.prompt.to_dict(),
            "runNumber": self.run_number,
        }
        if self.components is not None:
            data["components"] = self.components
        if self.error is not None:
            data["error"] = self.error
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class ValidatedResult:
    """A GenerationResult plus the ordered issues found for it.

    validated is False for items passed through without validation (upstream
    error or no components); such items are neither passed nor failed.
    """

    result: GenerationResult
    issues: tuple[ValidationIssue, ...] = ()
    validated: bool = True

    @property
    def validation_errors(self) -> list[str]:
        return [str(issue) for issue in self.issues]

    @property
    def passed(self) -> bool:
        return self.validated and not self.issues

    @property
    def failed(self) -> bool:
        return self.validated and bool(self.issues)

    def to_dict(self) -> dict[str, Any]:
        data = self.result.to_dict()
        data["validationErrors"] = self.validation_errors
        return data


@dataclass(frozen=True)
class BatchSummary:
    """Pass/fail tally for one batch. skipped counts pass-through items."""

    total: int
    passed: int
    failed: int
    skipped: int = 0
