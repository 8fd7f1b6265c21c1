"""SDK verbs bound into fragments.

Every verb funnels through `SdkRuntime.call(route, payload)`. The runtime
resolves once, on first use, to either the authenticated HTTP client or the
in-process stub backend; the stub answers with the same shapes and marks its
output as synthetic (`[STUB]` strings, `"stub": True` mappings).
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from ..adapters.sdk_client import SdkClient
from ..core.config import SdkSettings
from ..core.context import RunContext
from ..core.errors import SdkError
from ..core.runtime.env import getenv
from ..core.runtime.logging import log_event

STUB_PREFIX = "[STUB]"
STUB_MODEL = "stub"
EMBED_DIMENSIONS = 1536
PREVIEW_COUNT = 3

# remote failures on these routes propagate instead of degrading to the stub
STRICT_ROUTES = frozenset({"db/get", "db/upsert", "db/delete"})


class Backend(Protocol):
    def call(self, route: str, payload: dict[str, Any]) -> Any: ...


class StubBackend:
    """Deterministic offline answers; the db is an in-memory table set."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        self._sequence = 0

    def call(self, route: str, payload: dict[str, Any]) -> Any:
        handler = getattr(self, "_" + route.replace("/", "_"), None)
        if handler is None:
            return {"function": route.rsplit("/", 1)[-1], "args": list(payload.get("args", [])), "stub": True}
        return handler(**payload)

    def _ai_generate(self, prompt: str, **_options: Any) -> dict[str, Any]:
        return {"text": f"{STUB_PREFIX} Response for: {prompt}", "model": STUB_MODEL, "cost": 0, "stub": True}

    def _ai_embed(self, text: str, **_options: Any) -> dict[str, Any]:
        return {"embedding": [0.0] * EMBED_DIMENSIONS, "dimensions": EMBED_DIMENSIONS, "model": STUB_MODEL, "stub": True}

    def _ai_list(self, topic: str, **_options: Any) -> dict[str, Any]:
        items = [f"{STUB_PREFIX} Item {i} about {topic}" for i in (1, 2)]
        return {"items": items, "model": STUB_MODEL, "stub": True}

    def _ai_code(self, description: str, **_options: Any) -> dict[str, Any]:
        return {"code": f"# Code for: {description}", "language": "python", "model": STUB_MODEL, "stub": True}

    def _ai_analyze(self, content: str, analysis: str, **_options: Any) -> dict[str, Any]:
        return {"result": f'{STUB_PREFIX} Analysis of "{content}": {analysis}', "model": STUB_MODEL, "stub": True}

    def _db_get(self, ns: str, id: str) -> dict[str, Any] | None:
        record = self._tables.get(ns, {}).get(id)
        return None if record is None else dict(record)

    def _db_list(self, ns: str, **_options: Any) -> dict[str, Any]:
        items = [dict(record) for record in self._tables.get(ns, {}).values()]
        return {"items": items, "total": len(items), "stub": True}

    def _db_upsert(self, thing: dict[str, Any]) -> dict[str, Any]:
        ns = str(thing.get("ns", "default"))
        record = dict(thing, ns=ns)
        if not record.get("id"):
            self._sequence += 1
            record["id"] = f"{ns}-{self._sequence}"
        self._tables.setdefault(ns, {})[str(record["id"])] = record
        return {**record, "stub": True}

    def _db_delete(self, ns: str, id: str) -> dict[str, Any]:
        removed = self._tables.get(ns, {}).pop(id, None)
        return {"ns": ns, "id": id, "deleted": removed is not None, "stub": True}

    def _db_search(self, query: str, **_options: Any) -> dict[str, Any]:
        needle = query.lower()
        items = [
            dict(record)
            for table in self._tables.values()
            for record in table.values()
            if any(isinstance(v, str) and needle in v.lower() for v in record.values())
        ]
        return {"items": items, "total": len(items), "stub": True}

    def _db_count(self, ns: str, **_options: Any) -> int:
        return len(self._tables.get(ns, {}))

    def _list(self, topic: str) -> list[str]:
        return [f"{STUB_PREFIX} Item {i} for {topic}" for i in range(1, PREVIEW_COUNT + 1)]

    def _research(self, topic: str) -> str:
        return f"{STUB_PREFIX} Research results for: {topic}"

    def _extract(self, text: str) -> list[str]:
        return [f"{STUB_PREFIX} Extracted item {i} from {text}" for i in range(1, PREVIEW_COUNT + 1)]


class SdkRuntime:
    def __init__(
        self,
        settings: SdkSettings | None = None,
        *,
        skip_auth: bool = False,
        ctx: RunContext | None = None,
        client_factory: Callable[..., Backend] = SdkClient,
    ) -> None:
        self.settings = settings or SdkSettings()
        self.skip_auth = skip_auth
        self._ctx = ctx
        self._client_factory = client_factory
        self._remote: Backend | None = None
        self._stub = StubBackend()
        self._resolved = False

    @property
    def remote(self) -> bool:
        self.resolve()
        return self._remote is not None

    def resolve(self) -> None:
        if self._resolved:
            return
        self._resolved = True
        if self.skip_auth:
            log_event(self._ctx, "info", "sdk", "stub_selected", reason="skip_auth")
            return
        api_key = getenv(self.settings.api_key_env)
        if not api_key:
            log_event(self._ctx, "info", "sdk", "stub_selected", reason="no_api_key", env=self.settings.api_key_env)
            return
        base_url = getenv("LITDOC_API_BASE_URL") or self.settings.base_url
        self._remote = self._client_factory(base_url=base_url, api_key=api_key, timeout=self.settings.timeout)
        log_event(self._ctx, "info", "sdk", "remote_selected", base_url=base_url)

    def call(self, route: str, payload: dict[str, Any]) -> Any:
        self.resolve()
        if self._remote is None:
            return self._stub.call(route, payload)
        try:
            return self._remote.call(route, payload)
        except SdkError as exc:
            if route in STRICT_ROUTES:
                raise
            log_event(self._ctx, "warn", "sdk", "remote_failed", route=route, error=str(exc))
            return self._stub.call(route, payload)

    def close(self) -> None:
        close = getattr(self._remote, "close", None)
        if callable(close):
            close()

    def bindings(self) -> dict[str, Any]:
        return {
            "ai": AiVerb(self),
            "db": DbVerb(self),
            "on": on,
            "send": send,
            "list_": lambda topic: self.call("list", {"topic": str(topic)}),
            "research": lambda topic: self.call("research", {"topic": str(topic)}),
            "extract": lambda text: self.call("extract", {"text": str(text)}),
        }


class AiVerb:
    """`ai(prompt)` returns text; attributes map onto `ai/<name>` routes."""

    def __init__(self, runtime: SdkRuntime) -> None:
        self._runtime = runtime

    def __call__(self, prompt: str) -> str:
        answer = self.generate(prompt)
        if isinstance(answer, dict):
            return str(answer.get("text", ""))
        return str(answer)

    def generate(self, prompt: str, **options: Any) -> Any:
        return self._runtime.call("ai/generate", {"prompt": prompt, **options})

    def embed(self, text: str, **options: Any) -> Any:
        return self._runtime.call("ai/embed", {"text": text, **options})

    def list(self, topic: str, **options: Any) -> Any:
        return self._runtime.call("ai/list", {"topic": topic, **options})

    def code(self, description: str, **options: Any) -> Any:
        return self._runtime.call("ai/code", {"description": description, **options})

    def analyze(self, content: str, analysis: str, **options: Any) -> Any:
        return self._runtime.call("ai/analyze", {"content": content, "analysis": analysis, **options})

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        def verb(*args: Any) -> Any:
            return self._runtime.call(f"ai/{name}", {"args": list(args)})

        return verb

    def __repr__(self) -> str:
        return "<sdk verb ai>"


class DbVerb:
    def __init__(self, runtime: SdkRuntime) -> None:
        self._runtime = runtime

    def get(self, ns: str, id: str) -> Any:
        return self._runtime.call("db/get", {"ns": ns, "id": id})

    def list(self, ns: str, **options: Any) -> Any:
        return self._runtime.call("db/list", {"ns": ns, **options})

    def upsert(self, thing: dict[str, Any]) -> Any:
        return self._runtime.call("db/upsert", {"thing": dict(thing)})

    def delete(self, ns: str, id: str) -> Any:
        return self._runtime.call("db/delete", {"ns": ns, "id": id})

    def search(self, query: str, **options: Any) -> Any:
        return self._runtime.call("db/search", {"query": query, **options})

    def count(self, ns: str, **options: Any) -> int:
        result = self._runtime.call("db/count", {"ns": ns, **options})
        if isinstance(result, dict):
            return int(result.get("total", 0))
        return int(result)

    def __repr__(self) -> str:
        return "<sdk verb db>"


def on(event: str, callback: Callable[..., Any]) -> Callable[..., Any]:
    return callback


def send(event: str, data: Any = None) -> dict[str, Any]:
    return {"event": event, "data": data}
