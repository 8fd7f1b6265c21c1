from __future__ import annotations

import json
from pathlib import Path

import pytest
from helpers import fence, run_litdoc

pytestmark = pytest.mark.integration


def test_version_flag() -> None:
    proc = run_litdoc("--version")
    assert proc.returncode == 0
    assert "litdoc 0.1.0" in proc.stdout


def test_version_command_json(tmp_path: Path) -> None:
    proc = run_litdoc("--cwd", str(tmp_path), "version", "--json")
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["tool"] == "litdoc"
    assert payload["run_id"] == "pytest-run"


def test_run_through_module_entrypoint(tmp_path: Path) -> None:
    (tmp_path / "doc.md").write_text(fence("expect(1).to_be(1)", meta="assert"), encoding="utf-8")
    proc = run_litdoc("run", "doc.md", "--skip-auth", cwd=tmp_path)
    assert proc.returncode == 0, proc.stderr
    assert "status: pass" in proc.stdout


def test_log_json_emits_structured_log_lines(tmp_path: Path) -> None:
    (tmp_path / "doc.md").write_text(fence("1"), encoding="utf-8")
    proc = run_litdoc("--log-json", "--run-id", "log-json-test", "run", "doc.md", "--skip-auth", cwd=tmp_path)
    assert proc.returncode == 0, proc.stderr
    lines = [line for line in proc.stderr.splitlines() if line.startswith("{")]
    assert lines
    events = [json.loads(line) for line in lines]
    assert all(event["run_id"] == "log-json-test" for event in events)
    assert {"runner", "sdk"} <= {event["component"] for event in events}


def test_config_command_reports_the_source(tmp_path: Path) -> None:
    (tmp_path / "litdoc.yaml").write_text("default_context: test\n", encoding="utf-8")
    proc = run_litdoc("--cwd", str(tmp_path), "config", "--json")
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["profile"] == "test"
    assert payload["resolved"]["source"].endswith("litdoc.yaml")
