"""Tests for bin/validate_batch.py — batch validation CLI.

Coverage strategy:
    - File exists + is executable (filesystem check)
    - Module importable via importlib
    - parse_args() defaults, CLI overrides, env var fallbacks, CLI wins over env
    - --max-workers rejects values below 1
    - main() exit codes: 0 all passed, 1 failures, 2 load/config errors
    - --output-dir writes one YAML document per failed item
    - --json prints every validated result with validationErrors
    - Subprocess run with PYTHONPATH=scripts
"""

from __future__ import annotations

import importlib.util
import json
import os
import subprocess
import sys
from pathlib import Path
from types import ModuleType
from unittest import mock

import pytest
import yaml

from fixtures.fixture_loader import SCHEMA_DIR, MessageFixture

# ─── Helpers ──────────────────────────────────────────────────────────────────

CLI_PATH = Path(__file__).parent.parent / "bin" / "validate_batch.py"
SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"

ENV_VARS = ("A2UI_EVAL_SCHEMA_DIR", "A2UI_EVAL_OUTPUT_DIR", "A2UI_EVAL_MAX_WORKERS")


def _load_cli() -> ModuleType:
    """Load bin/validate_batch.py as a Python module via importlib."""
    spec = importlib.util.spec_from_file_location("validate_batch", CLI_PATH)
    assert spec is not None, f"Could not create module spec for {CLI_PATH}"
    assert spec.loader is not None, "Module spec has no loader"
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore[union-attr]
    return module


def _clean_env(env: dict | None = None) -> dict:
    clean = {k: v for k, v in os.environ.items() if k not in ENV_VARS}
    if env:
        clean.update(env)
    return clean


def _parse(argv: list[str], env: dict | None = None):
    module = _load_cli()
    with mock.patch.dict("os.environ", _clean_env(env), clear=True):
        return module.parse_args(argv)


def _write_batch(tmp_path: Path, records: list[dict], name: str = "batch.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(records))
    return path


@pytest.fixture
def records() -> list[dict]:
    return MessageFixture().batch_records()


@pytest.fixture
def passing_records(records) -> list[dict]:
    return [records[0], records[1], records[3]]


# ─── Filesystem checks ────────────────────────────────────────────────────────


class TestCliFile:
    def test_cli_script_exists(self) -> None:
        assert CLI_PATH.exists(), f"bin/validate_batch.py not found at {CLI_PATH}"

    def test_cli_script_is_executable(self) -> None:
        assert os.access(CLI_PATH, os.X_OK), (
            f"bin/validate_batch.py is not executable — run: chmod +x {CLI_PATH}"
        )

    def test_module_exposes_entry_points(self) -> None:
        module = _load_cli()
        assert callable(module.parse_args)
        assert callable(module.main)


# ─── Arg parsing ──────────────────────────────────────────────────────────────


class TestArgParsing:
    def test_defaults(self) -> None:
        args = _parse(["batch.json"])
        assert args.batch == "batch.json"
        assert args.schema_dir == "specification/0.9/json"
        assert args.output_dir is None
        assert args.max_workers == 1
        assert args.json is False

    def test_cli_overrides(self) -> None:
        args = _parse(
            [
                "batch.json",
                "--schema-dir", "schemas",
                "--output-dir", "out",
                "--max-workers", "4",
                "--json",
            ]
        )
        assert (args.schema_dir, args.output_dir, args.max_workers, args.json) == (
            "schemas", "out", 4, True,
        )

    def test_env_fallbacks(self) -> None:
        args = _parse(
            ["batch.json"],
            env={
                "A2UI_EVAL_SCHEMA_DIR": "env-schemas",
                "A2UI_EVAL_OUTPUT_DIR": "env-out",
                "A2UI_EVAL_MAX_WORKERS": "3",
            },
        )
        assert (args.schema_dir, args.output_dir, args.max_workers) == ("env-schemas", "env-out", 3)

    def test_cli_wins_over_env(self) -> None:
        args = _parse(
            ["batch.json", "--schema-dir", "cli-schemas", "--max-workers", "2"],
            env={"A2UI_EVAL_SCHEMA_DIR": "env-schemas", "A2UI_EVAL_MAX_WORKERS": "8"},
        )
        assert args.schema_dir == "cli-schemas"
        assert args.max_workers == 2

    def test_empty_output_dir_env_means_unset(self) -> None:
        args = _parse(["batch.json"], env={"A2UI_EVAL_OUTPUT_DIR": ""})
        assert args.output_dir is None

    @pytest.mark.parametrize("value", ["0", "-2"])
    def test_max_workers_below_one_rejected(self, value: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _parse(["batch.json", "--max-workers", value])
        assert exc_info.value.code == 2

    def test_batch_is_required(self) -> None:
        with pytest.raises(SystemExit):
            _parse([])


# ─── main() ───────────────────────────────────────────────────────────────────


class TestMain:
    def _main(self, argv: list[str]) -> int:
        module = _load_cli()
        with mock.patch.dict("os.environ", _clean_env(), clear=True):
            return module.main(argv)

    def test_all_passed_exits_zero(self, tmp_path: Path, passing_records, capsys) -> None:
        batch = _write_batch(tmp_path, passing_records)
        assert self._main([str(batch), "--schema-dir", str(SCHEMA_DIR)]) == 0
        out = capsys.readouterr().out
        assert "Validation: 1 passed, 0 failed, 2 skipped (3 items)" in out

    def test_failure_exits_one_and_lists_errors(self, tmp_path: Path, records, capsys) -> None:
        batch = _write_batch(tmp_path, records)
        assert self._main([str(batch), "--schema-dir", str(SCHEMA_DIR)]) == 1
        out = capsys.readouterr().out
        assert "=== openai:gpt-4o / dangling-ref run 1 ===" in out
        assert 'references non-existent component ID "B"' in out
        assert "Validation: 1 passed, 1 failed, 2 skipped (4 items)" in out

    def test_missing_schema_dir_exits_two(self, tmp_path: Path, records, capsys) -> None:
        batch = _write_batch(tmp_path, records)
        assert self._main([str(batch), "--schema-dir", str(tmp_path / "nope")]) == 2
        assert "Schema directory not found" in capsys.readouterr().err

    def test_missing_batch_exits_two(self, tmp_path: Path, capsys) -> None:
        assert self._main([str(tmp_path / "none.json"), "--schema-dir", str(SCHEMA_DIR)]) == 2
        assert "Batch file not found" in capsys.readouterr().err

    def test_invalid_schema_exits_two(self, tmp_path: Path, records, capsys) -> None:
        schema_dir = tmp_path / "schemas"
        schema_dir.mkdir()
        (schema_dir / "server_to_client.json").write_text(
            json.dumps({"$id": "https://a2ui.dev/specification/0.9/server_to_client.json", "type": 12})
        )
        batch = _write_batch(tmp_path, records)
        assert self._main([str(batch), "--schema-dir", str(schema_dir)]) == 2
        assert "not a valid JSON Schema" in capsys.readouterr().err

    def test_output_dir_receives_failure_documents(self, tmp_path: Path, records) -> None:
        batch = _write_batch(tmp_path, records)
        out_dir = tmp_path / "out"
        self._main([str(batch), "--schema-dir", str(SCHEMA_DIR), "--output-dir", str(out_dir)])
        written = sorted(p.relative_to(out_dir).as_posix() for p in out_dir.rglob("*.yaml"))
        assert written == ["output-openai_gpt-4o/details/dangling-ref.1.failed.yaml"]
        with open(out_dir / written[0]) as f:
            document = yaml.safe_load(f)
        assert document["pass"] is False
        assert document["overallSeverity"] == "criticalSchema"

    def test_json_output(self, tmp_path: Path, records, capsys) -> None:
        batch = _write_batch(tmp_path, records, name="batch.jsonl")
        batch.write_text("\n".join(json.dumps(r) for r in records))
        assert self._main([str(batch), "--schema-dir", str(SCHEMA_DIR), "--json"]) == 1
        payload = json.loads(capsys.readouterr().out)
        assert [len(item["validationErrors"]) for item in payload] == [0, 0, 1, 0]
        assert payload[1]["error"] == "upstream timeout"

    def test_json_output_keeps_upstream_fields(self, tmp_path: Path, records, capsys) -> None:
        records[0]["latency"] = 812
        records[0]["prompt"]["promptText"] = "Build a login form"
        batch = _write_batch(tmp_path, records)
        self._main([str(batch), "--schema-dir", str(SCHEMA_DIR), "--json"])
        first = json.loads(capsys.readouterr().out)[0]
        assert first["latency"] == 812
        assert first["prompt"] == {"name": "login-form", "promptText": "Build a login form"}
        assert first["validationErrors"] == []

    def test_yaml_batch_with_date_like_text_json_output(self, tmp_path: Path, capsys) -> None:
        batch = tmp_path / "batch.yaml"
        batch.write_text(
            "- modelName: gemini/flash-2.5\n"
            "  prompt: {name: release-notes}\n"
            "  runNumber: 1\n"
            "  components:\n"
            "    - updateComponents:\n"
            "        surfaceId: main\n"
            "        components:\n"
            "          - id: root\n"
            "            props: {component: Text, text: 2024-01-01}\n"
        )
        assert self._main([str(batch), "--schema-dir", str(SCHEMA_DIR), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        text = payload[0]["components"][0]["updateComponents"]["components"][0]["props"]["text"]
        assert text == "2024-01-01"
        assert payload[0]["validationErrors"] == []

    def test_worker_pool_matches_sequential(self, tmp_path: Path, records, capsys) -> None:
        batch = _write_batch(tmp_path, records)
        self._main([str(batch), "--schema-dir", str(SCHEMA_DIR), "--json"])
        sequential = capsys.readouterr().out
        self._main([str(batch), "--schema-dir", str(SCHEMA_DIR), "--json", "--max-workers", "3"])
        assert capsys.readouterr().out == sequential


# ─── Subprocess ───────────────────────────────────────────────────────────────


class TestSubprocess:
    def test_help_lists_flags(self) -> None:
        env = _clean_env({"PYTHONPATH": str(SCRIPTS_DIR)})
        result = subprocess.run(
            [sys.executable, str(CLI_PATH), "--help"],
            capture_output=True, text=True, env=env, timeout=30,
        )
        assert result.returncode == 0
        for flag in ("--schema-dir", "--output-dir", "--max-workers", "--json"):
            assert flag in result.stdout

    def test_end_to_end_exit_code(self, tmp_path: Path, records) -> None:
        batch = _write_batch(tmp_path, records)
        env = _clean_env({"PYTHONPATH": str(SCRIPTS_DIR), "A2UI_EVAL_SCHEMA_DIR": str(SCHEMA_DIR)})
        result = subprocess.run(
            [sys.executable, str(CLI_PATH), str(batch)],
            capture_output=True, text=True, env=env, timeout=30,
        )
        assert result.returncode == 1, result.stderr
        assert "1 failed" in result.stdout
        assert "Validation complete. Passed: 1, Failed: 1, Skipped: 2" in result.stderr
