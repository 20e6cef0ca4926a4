"""Batch validation: run both checkers over every generation result.

Output is index-aligned with input. Items whose upstream generation failed
(or produced no components) are passed through unvalidated and excluded
from the pass/fail tally.

Design decisions:
    - validate() is pure; persistence happens in run() only after every
      item's issues are known, and only for failed items.
    - With max_workers > 1 items are fanned out over a thread pool. Results
      land in pre-sized slots, never appended on completion.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from a2ui_eval.reporter import FailureReporter
from a2ui_eval.schema_checker import SchemaConformanceChecker
from a2ui_eval.semantic import SemanticValidator
from a2ui_eval.types import BatchSummary, GenerationResult, ValidatedResult, ValidationIssue

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Drives schema and semantic validation over a batch.

    Dependency injection:
        schema_checker is required (it owns the schema registry).
        semantic_validator defaults to SemanticValidator().
        reporter is optional; without it nothing is persisted.
    """

    def __init__(
        self,
        schema_checker: SchemaConformanceChecker,
        semantic_validator: SemanticValidator | None = None,
        reporter: FailureReporter | None = None,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._schema_checker = schema_checker
        self._semantic_validator = (
            semantic_validator if semantic_validator is not None else SemanticValidator()
        )
        self._reporter = reporter
        self._max_workers = max_workers

    def validate_item(self, result: GenerationResult) -> ValidatedResult:
        """Validate one generation result."""
        if result.error or not result.components:
            return ValidatedResult(result=result, issues=(), validated=False)

        issues: list[ValidationIssue] = []
        for message in result.components:
            issues.extend(self._schema_checker.check(message))
        issues.extend(self._semantic_validator.validate(result.components))
        return ValidatedResult(result=result, issues=tuple(issues))

    def validate(self, results: Sequence[GenerationResult]) -> list[ValidatedResult]:
        """Validate a batch; output[i] corresponds to results[i]."""
        if self._max_workers == 1 or len(results) < 2:
            return [self.validate_item(r) for r in results]

        slots: list[ValidatedResult | None] = [None] * len(results)
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = {pool.submit(self.validate_item, r): i for i, r in enumerate(results)}
            for future, index in futures.items():
                slots[index] = future.result()
        return [slot for slot in slots if slot is not None]

    @staticmethod
    def summarize(validated: Sequence[ValidatedResult]) -> BatchSummary:
        return BatchSummary(
            total=len(validated),
            passed=sum(1 for v in validated if v.passed),
            failed=sum(1 for v in validated if v.failed),
            skipped=sum(1 for v in validated if not v.validated),
        )

    def run(self, results: Sequence[GenerationResult]) -> list[ValidatedResult]:
        """Validate a batch, log the summary and persist failures."""
        logger.info("Starting schema validation (%d items)", len(results))
        validated = self.validate(results)
        summary = self.summarize(validated)
        logger.info(
            "Validation complete. Passed: %d, Failed: %d, Skipped: %d",
            summary.passed,
            summary.failed,
            summary.skipped,
        )
        if self._reporter is not None:
            self._reporter.report_all(validated)
        return validated
