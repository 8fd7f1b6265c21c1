from __future__ import annotations

from typing import Any

import pytest

from litdoc.core.config import SdkSettings
from litdoc.core.errors import SdkError
from litdoc.engine.sdk import EMBED_DIMENSIONS, STUB_PREFIX, SdkRuntime


class FakeClient:
    def __init__(self, *, base_url: str, api_key: str, timeout: float) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail = False

    def call(self, route: str, payload: dict[str, Any]) -> Any:
        self.calls.append((route, payload))
        if self.fail:
            raise SdkError(f"{route} failed: 503", status_code=503)
        return {"text": f"remote:{payload.get('prompt')}"}


def _remote_runtime(monkeypatch: pytest.MonkeyPatch) -> tuple[SdkRuntime, list[FakeClient]]:
    created: list[FakeClient] = []

    def factory(**kwargs: Any) -> FakeClient:
        client = FakeClient(**kwargs)
        created.append(client)
        return client

    monkeypatch.setenv("LITDOC_API_KEY", "secret")
    return SdkRuntime(SdkSettings(base_url="https://sdk.invalid"), client_factory=factory), created


def test_without_api_key_the_stub_answers() -> None:
    runtime = SdkRuntime()
    verbs = runtime.bindings()
    assert not runtime.remote
    assert verbs["ai"]("hello") == f"{STUB_PREFIX} Response for: hello"
    embedding = verbs["ai"].embed("text")
    assert embedding["dimensions"] == EMBED_DIMENSIONS and embedding["stub"] is True
    assert verbs["ai"].summarize("a", 1) == {"function": "summarize", "args": ["a", 1], "stub": True}
    assert verbs["research"]("llms") == f"{STUB_PREFIX} Research results for: llms"
    assert len(verbs["list_"]("ideas")) == 3
    assert verbs["extract"]("doc")[0] == f"{STUB_PREFIX} Extracted item 1 from doc"
    assert verbs["send"]("signup", {"id": 1}) == {"event": "signup", "data": {"id": 1}}
    handler = lambda event: event  # noqa: E731
    assert verbs["on"]("signup", handler) is handler


def test_stub_db_is_an_in_memory_table() -> None:
    db = SdkRuntime(skip_auth=True).bindings()["db"]
    created = db.upsert({"ns": "posts", "title": "Hello world"})
    assert created["id"] == "posts-1" and created["stub"] is True
    assert db.get("posts", "posts-1")["title"] == "Hello world"
    assert db.count("posts") == 1
    assert db.search("hello")["total"] == 1
    assert db.delete("posts", "posts-1")["deleted"] is True
    assert db.get("posts", "posts-1") is None
    assert db.list("posts") == {"items": [], "total": 0, "stub": True}


def test_skip_auth_never_builds_a_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LITDOC_API_KEY", "secret")

    def factory(**_kwargs: Any) -> FakeClient:
        raise AssertionError("client must not be created")

    runtime = SdkRuntime(skip_auth=True, client_factory=factory)
    assert not runtime.remote


def test_remote_client_receives_routes(monkeypatch: pytest.MonkeyPatch) -> None:
    runtime, created = _remote_runtime(monkeypatch)
    assert runtime.bindings()["ai"]("hi") == "remote:hi"
    (client,) = created
    assert client.api_key == "secret"
    assert client.base_url == "https://sdk.invalid"
    assert client.calls == [("ai/generate", {"prompt": "hi"})]


def test_remote_failures_fall_back_except_for_strict_routes(monkeypatch: pytest.MonkeyPatch) -> None:
    runtime, created = _remote_runtime(monkeypatch)
    runtime.resolve()
    created[0].fail = True
    verbs = runtime.bindings()
    assert verbs["ai"]("hi").startswith(STUB_PREFIX)
    with pytest.raises(SdkError):
        verbs["db"].get("posts", "1")
