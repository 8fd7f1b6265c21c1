from __future__ import annotations

import json

import httpx
import pytest

from litdoc.adapters.sdk_client import SdkClient
from litdoc.core.errors import SdkError


def _client(handler) -> SdkClient:
    return SdkClient(base_url="https://sdk.invalid/", api_key="secret", transport=httpx.MockTransport(handler))


def test_posts_json_and_decodes_json_responses() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"text": "ok"})

    assert _client(handler).call("ai/generate", {"prompt": "hi"}) == {"text": "ok"}
    assert seen[0].url.path == "/ai/generate"
    assert json.loads(seen[0].content) == {"prompt": "hi"}
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_http_errors_become_sdk_errors() -> None:
    client = _client(lambda request: httpx.Response(503))
    with pytest.raises(SdkError) as info:
        client.call("db/get", {"ns": "posts", "id": "1"})
    assert info.value.status_code == 503


def test_bearer_token_is_sent() -> None:
    client = SdkClient(base_url="https://sdk.invalid", api_key="secret")
    assert client._client.headers["Authorization"] == "Bearer secret"
    client.close()
