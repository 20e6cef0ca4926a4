"""Persist failure documents for items that failed validation.

Layout under the configured output directory:

    output-<model>/details/<prompt>.<run>.failed.yaml

Model and prompt names have / \\ and : replaced by _, so every document
stays inside its model's details directory.

Document shape:

    pass: false
    reason: Schema validation failure
    issues:
      - issue: <error string>
        severity: criticalSchema
    overallSeverity: criticalSchema

A write failure is logged and skipped; the validation result it belongs to
is already final.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable

import yaml

from a2ui_eval.types import GenerationResult, IssueSeverity, ValidatedResult

logger = logging.getLogger(__name__)

FAILURE_REASON = "Schema validation failure"

_UNSAFE_PATH_CHARS = re.compile(r"[/\\:]")


def sanitize_path_part(name: str) -> str:
    return _UNSAFE_PATH_CHARS.sub("_", name)


class FailureReporter:
    """Writes one YAML failure document per failed item."""

    def __init__(
        self,
        output_dir: str | Path,
        severity: IssueSeverity = IssueSeverity.CRITICAL_SCHEMA,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._severity = severity

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, result: GenerationResult) -> Path:
        model_dir = self._output_dir / f"output-{sanitize_path_part(result.model_name)}"
        prompt_name = sanitize_path_part(result.prompt.name)
        return model_dir / "details" / f"{prompt_name}.{result.run_number}.failed.yaml"

    def build_document(self, validated: ValidatedResult) -> dict[str, Any]:
        return {
            "pass": False,
            "reason": FAILURE_REASON,
            "issues": [
                {"issue": error, "severity": self._severity.value}
                for error in validated.validation_errors
            ],
            "overallSeverity": self._severity.value,
        }

    def report(self, validated: ValidatedResult) -> Path | None:
        """Write the failure document for one failed item.

        Returns the path written, or None if the write failed.

        Raises:
            ValueError: the item did not fail validation.
        """
        if not validated.failed:
            raise ValueError(
                f"Refusing to report {validated.result.prompt.name!r} run "
                f"{validated.result.run_number}: item did not fail validation"
            )
        path = self.path_for(validated.result)
        document = self.build_document(validated)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(document, f, sort_keys=False)
        except OSError as e:
            logger.error("Could not write failure report %s: %s", path, e)
            return None
        logger.debug("Wrote failure report %s (%d issues)", path, len(document["issues"]))
        return path

    def report_all(self, validated_results: Iterable[ValidatedResult]) -> list[Path]:
        """Report every failed item; returns the paths actually written."""
        written: list[Path] = []
        for validated in validated_results:
            if not validated.failed:
                continue
            path = self.report(validated)
            if path is not None:
                written.append(path)
        return written
