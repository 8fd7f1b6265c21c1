from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase

from litdoc.core.config import LitdocConfig
from litdoc.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

_ROOT = Path(__file__).resolve().parents[1]
_HYPOTHESIS_DB = _ROOT / "artifacts/litdoc/.hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("litdoc", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB))
settings.load_profile("litdoc")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LITDOC_API_KEY", raising=False)
    monkeypatch.delenv("CI", raising=False)


@pytest.fixture
def run_ctx(tmp_path: Path) -> RunContext:
    return RunContext(run_id="pytest-run", cwd=tmp_path, quiet=True, config=LitdocConfig())


@pytest.fixture
def update_ctx(tmp_path: Path) -> RunContext:
    return RunContext(run_id="pytest-run", cwd=tmp_path, quiet=True, update=True, skip_auth=True, config=LitdocConfig())
