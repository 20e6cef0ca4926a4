#!/usr/bin/env python3
"""Validate a batch of generated A2UI message sets.

Loads the schema documents, validates every generation result in the batch
(JSON Schema conformance + semantic/referential integrity), prints a summary
and, when an output directory is configured, writes one YAML failure
document per failed item.

Configuration (CLI args take precedence over env vars):
    --schema-dir   Schema directory        (env: A2UI_EVAL_SCHEMA_DIR,  default: "specification/0.9/json")
    --output-dir   Failure report root     (env: A2UI_EVAL_OUTPUT_DIR,  default: unset, nothing persisted)
    --max-workers  Validation thread pool  (env: A2UI_EVAL_MAX_WORKERS, default: 1)

Exit codes:
    0  every validated item passed
    1  at least one item failed validation
    2  schema directory or batch file could not be loaded

Usage:
    bin/validate_batch.py results.json
    bin/validate_batch.py results.jsonl --output-dir out --max-workers 4
    A2UI_EVAL_SCHEMA_DIR=schemas bin/validate_batch.py results.yaml --json
"""

import argparse
import json
import logging
import os
import sys

from a2ui_eval.aggregator import ResultAggregator
from a2ui_eval.loader import BatchLoadError, SchemaLoadError, load_batch, load_schemas
from a2ui_eval.reporter import FailureReporter
from a2ui_eval.schema_checker import SchemaConfigError, SchemaConformanceChecker

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with environment variable fallbacks.

    Priority (highest → lowest):
        1. Explicit CLI flag (e.g. --schema-dir schemas)
        2. Environment variable (e.g. A2UI_EVAL_SCHEMA_DIR=schemas)
        3. Built-in default

    Args:
        argv: Argument list to parse. If None, reads from sys.argv[1:].

    Returns:
        Parsed namespace with .batch, .schema_dir, .output_dir, .max_workers, .json.
    """
    parser = argparse.ArgumentParser(
        description="Validate a batch of generated A2UI message sets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment variables:\n"
            "  A2UI_EVAL_SCHEMA_DIR   Schema directory     (default: 'specification/0.9/json')\n"
            "  A2UI_EVAL_OUTPUT_DIR   Failure report root  (default: unset)\n"
            "  A2UI_EVAL_MAX_WORKERS  Validation threads   (default: 1)\n"
        ),
    )
    parser.add_argument(
        "batch",
        metavar="BATCH",
        help="Batch file: JSON array, JSON Lines (.jsonl) or YAML list of generation results",
    )
    parser.add_argument(
        "--schema-dir",
        default=os.environ.get("A2UI_EVAL_SCHEMA_DIR", "specification/0.9/json"),
        metavar="DIR",
        help="Directory of JSON/YAML schema documents (env: A2UI_EVAL_SCHEMA_DIR)",
    )
    parser.add_argument(
        "--output-dir",
        default=os.environ.get("A2UI_EVAL_OUTPUT_DIR") or None,
        metavar="DIR",
        help="Write failure documents under DIR (env: A2UI_EVAL_OUTPUT_DIR)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=int(os.environ.get("A2UI_EVAL_MAX_WORKERS", "1")),
        metavar="N",
        help="Validate up to N items concurrently (env: A2UI_EVAL_MAX_WORKERS, default: 1)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print every validated result as JSON instead of a text summary",
    )
    args = parser.parse_args(argv)
    if args.max_workers < 1:
        parser.error(f"--max-workers must be >= 1, got {args.max_workers}")
    return args


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code: 0=all passed, 1=failures, 2=load error."""
    args = parse_args(argv)

    try:
        schemas = load_schemas(args.schema_dir)
        checker = SchemaConformanceChecker(schemas)
        batch = load_batch(args.batch)
    except (SchemaLoadError, SchemaConfigError, BatchLoadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    reporter = FailureReporter(args.output_dir) if args.output_dir else None
    aggregator = ResultAggregator(checker, reporter=reporter, max_workers=args.max_workers)
    validated = aggregator.run(batch)
    summary = aggregator.summarize(validated)

    if args.json:
        print(json.dumps([v.to_dict() for v in validated], indent=2))
    else:
        for v in validated:
            if not v.failed:
                continue
            print(f"\n=== {v.result.model_name} / {v.result.prompt.name} run {v.result.run_number} ===")
            for error in v.validation_errors:
                print(f"  {error}")
        print(
            f"\nValidation: {summary.passed} passed, {summary.failed} failed, "
            f"{summary.skipped} skipped ({summary.total} items)"
        )

    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
