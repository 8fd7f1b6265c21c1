from __future__ import annotations

from pathlib import Path

import pytest

from litdoc.core.context import RunContext


def test_from_args_prefers_explicit_values(tmp_path: Path) -> None:
    ctx = RunContext.from_args("explicit", execution_context="staging", concurrency=0, cwd=str(tmp_path))
    assert ctx.run_id == "explicit"
    assert ctx.cwd == tmp_path.resolve()
    assert ctx.profile == "staging"
    assert ctx.concurrency == 1


def test_run_id_and_timeout_fall_back(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "litdoc.yaml").write_text("timeout: 3\ndefault_context: test\n", encoding="utf-8")
    monkeypatch.setenv("RUN_ID", "from-env")
    ctx = RunContext.from_args(None, cwd=str(tmp_path))
    assert ctx.run_id == "from-env"
    assert ctx.timeout == 3
    assert ctx.profile == "test"


def test_generated_run_id(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("RUN_ID", raising=False)
    assert RunContext.from_args(None, cwd=str(tmp_path)).run_id.startswith("litdoc-")
