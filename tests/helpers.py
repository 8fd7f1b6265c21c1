from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def run_litdoc(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    env.setdefault("RUN_ID", "pytest-run")
    env.pop("CI", None)
    env.pop("LITDOC_API_KEY", None)
    return subprocess.run(
        [sys.executable, "-m", "litdoc.cli", *args],
        cwd=(cwd or ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )


def fence(code: str, meta: str = "doc", language: str = "python") -> str:
    return f"```{language} {meta}\n{code}\n```\n"
