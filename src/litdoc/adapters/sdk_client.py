"""HTTP client behind the SDK verbs bound into fragments."""

from __future__ import annotations

from typing import Any

import httpx

from ..core.errors import SdkError


class SdkClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def call(self, route: str, payload: dict[str, Any]) -> Any:
        try:
            response = self._client.post(f"/{route.lstrip('/')}", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SdkError(
                f"{route} failed: {exc.response.status_code} {exc.response.reason_phrase}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise SdkError(f"{route} failed: {exc}") from exc
        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    def close(self) -> None:
        self._client.close()
