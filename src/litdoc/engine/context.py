"""Namespace assembly for one fragment."""

from __future__ import annotations

import builtins
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..core.context import RunContext
from ..core.runtime.env import snapshot
from ..core.runtime.logging import log_event
from .assertions import make_expect
from .capture import CaptureRecorder
from .models import CodeBlock
from .sdk import SdkRuntime
from .state import SharedState

EXECUTION_CONTEXTS: dict[str, dict[str, str]] = {
    "dev": {"ENVIRONMENT": "development", "DEBUG": "true"},
    "test": {"ENVIRONMENT": "test", "DEBUG": "false"},
    "staging": {"ENVIRONMENT": "staging", "DEBUG": "false"},
    "production": {"ENVIRONMENT": "production", "DEBUG": "false"},
}
DEFAULT_CONTEXT = "dev"


@dataclass
class ExecutionContext:
    namespace: dict[str, Any]
    profile: str
    env: dict[str, str] = field(default_factory=dict)


def extract_execution_context(block: CodeBlock, profiles: Mapping[str, Any] = EXECUTION_CONTEXTS) -> str | None:
    """Profile named by the block meta: `context=<name>` first, then a bare token."""
    named = block.meta_option("context")
    if named:
        return named
    for token in block.meta.split():
        if token in profiles:
            return token
    return None


def _capturing_print(recorder: CaptureRecorder) -> Any:
    def print_(*args: Any, sep: str | None = " ", end: str | None = "\n", file: Any = None, flush: bool = False) -> None:
        builtins.print(*args, sep=sep, end=end, file=file, flush=flush)
        if file is not None or not args:
            return
        if len(args) == 1:
            recorder.result(args[0])
        else:
            recorder.result((" " if sep is None else sep).join(str(arg) for arg in args))

    return print_


class ExecutionContextFactory:
    def __init__(
        self,
        profiles: Mapping[str, Mapping[str, str]] | None = None,
        sdk_runtime: SdkRuntime | None = None,
        ctx: RunContext | None = None,
        default_profile: str = DEFAULT_CONTEXT,
    ) -> None:
        merged = {name: dict(env) for name, env in EXECUTION_CONTEXTS.items()}
        for name, env in (profiles or {}).items():
            merged[name] = dict(env)
        self.profiles = merged
        self.sdk_runtime = sdk_runtime or SdkRuntime(ctx=ctx)
        self.default_profile = default_profile
        self._ctx = ctx

    def resolve_profile(self, block: CodeBlock, requested: str | None = None) -> str:
        return requested or extract_execution_context(block, self.profiles) or self.default_profile

    def build(
        self,
        state: SharedState,
        *,
        recorder: CaptureRecorder,
        profile: str = DEFAULT_CONTEXT,
        extra: Mapping[str, Any] | None = None,
    ) -> ExecutionContext:
        env = self.profiles.get(profile)
        if env is None:
            log_event(self._ctx, "warn", "context", "unknown_profile", profile=profile, known=",".join(sorted(self.profiles)))
            env = {}
        self.sdk_runtime.resolve()

        def export(key: str, value: Any) -> Any:
            state[key] = value
            return value

        def import_(key: str, default: Any = None) -> Any:
            return state.get(key, default)

        namespace: dict[str, Any] = {"__name__": "__litdoc__", "__builtins__": builtins}
        namespace.update(self.sdk_runtime.bindings())
        namespace.update(
            {
                "env": dict(env),
                "environ": snapshot(env),
                "expect": make_expect(recorder),
                "export": export,
                "export_var": export,
                "import_": import_,
                "import_var": import_,
                "state": state,
                "print": _capturing_print(recorder),
            }
        )
        namespace.update(extra or {})
        return ExecutionContext(namespace=namespace, profile=profile, env=dict(env))
