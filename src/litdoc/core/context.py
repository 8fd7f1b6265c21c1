from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from .config import LitdocConfig, load_config
from .runtime.env import getenv

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    cwd: Path
    output_format: OutputFormat = "text"
    verbose: bool = False
    quiet: bool = False
    log_json: bool = False
    update: bool = False
    skip_auth: bool = False
    execution_context: str | None = None
    timeout: float | None = None
    concurrency: int = 1
    config: LitdocConfig = field(default_factory=LitdocConfig)

    @property
    def profile(self) -> str:
        return self.execution_context or self.config.default_context

    @classmethod
    def default(cls) -> "RunContext":
        return cls(run_id=_default_run_id(), cwd=Path.cwd())

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
        update: bool = False,
        skip_auth: bool = False,
        execution_context: str | None = None,
        timeout: float | None = None,
        concurrency: int = 1,
        config_path: str | None = None,
        cwd: str | None = None,
    ) -> "RunContext":
        root = Path(cwd).resolve() if cwd else Path.cwd()
        config = load_config(config_path, cwd=root)
        return cls(
            run_id=run_id or getenv("RUN_ID") or _default_run_id(),
            cwd=root,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
            update=update,
            skip_auth=skip_auth,
            execution_context=execution_context,
            timeout=timeout if timeout is not None else config.timeout,
            concurrency=max(1, concurrency),
            config=config,
        )


def _default_run_id() -> str:
    return f"litdoc-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"
