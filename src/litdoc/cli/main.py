from __future__ import annotations

import argparse
import dataclasses
import importlib
import platform
import sys

from .. import __version__
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_INTERNAL, ERR_USAGE, OK
from ..core.runtime.env import getenv
from ..core.runtime.logging import log_event
from .output import build_base_payload, emit, render_error, resolve_output_format


def _import_attr(module_name: str, attr: str):
    return getattr(importlib.import_module(module_name), attr)


def _version_string() -> str:
    return f"litdoc {__version__}"


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return value


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="litdoc", description="execute and annotate code examples in documents")
    p.add_argument("--version", action="version", version=_version_string())
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--run-id", help="run identifier for logs and reports")
    p.add_argument("--cwd", help="resolve documents and config from this directory")
    p.add_argument("--config", help="explicit config file (yaml or pyproject.toml)")
    p.add_argument("--log-json", action="store_true", help="write structured log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    version_p = sub.add_parser("version", help="print version information")
    version_p.add_argument("--json", action="store_true", help="emit JSON output")

    config_p = sub.add_parser("config", help="print the resolved configuration")
    config_p.add_argument("--json", action="store_true", help="emit JSON output")

    run_p = sub.add_parser("run", help="execute tagged code blocks of one or more documents")
    run_p.add_argument("files", nargs="+", help="markdown or mdx documents")
    run_p.add_argument("--update", action="store_true", help="write captured annotations back into the documents")
    run_p.add_argument("--skip-auth", action="store_true", help="use the offline SDK stub")
    run_p.add_argument("--context", dest="execution_context", help="execution context profile for every block")
    run_p.add_argument(
        "--timeout",
        type=_positive_float,
        help="per-block timeout in seconds; only enforced where the block awaits",
    )
    run_p.add_argument("--concurrency", type=_positive_int, default=1, help="documents processed at once")
    run_p.add_argument("--json", action="store_true", help="emit the JSON report")
    run_p.add_argument("--verbose", action="store_true", default=argparse.SUPPRESS, help="print per-block progress")
    run_p.add_argument("--config", default=argparse.SUPPRESS, help="explicit config file")
    return p


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    ns = build_parser().parse_args(raw_argv)
    fmt = resolve_output_format(cli_json=("--json" in raw_argv), cli_format=ns.format, ci_present=bool(getenv("CI")))
    ctx: RunContext | None = None
    try:
        if ns.format and "--json" in raw_argv and ns.format != "json":
            raise ScriptError("conflicting output flags: use either --format json or --json", ERR_USAGE, "usage")
        ctx = RunContext.from_args(
            ns.run_id,
            output_format=fmt,
            verbose=ns.verbose,
            quiet=ns.quiet,
            log_json=ns.log_json,
            update=getattr(ns, "update", False),
            skip_auth=getattr(ns, "skip_auth", False),
            execution_context=getattr(ns, "execution_context", None),
            timeout=getattr(ns, "timeout", None),
            concurrency=getattr(ns, "concurrency", 1),
            config_path=ns.config,
            cwd=ns.cwd,
        )
        log_event(ctx, "debug", "cli", "start", cmd=ns.cmd, fmt=ctx.output_format)
        as_json = ctx.output_format == "json"
        if ns.cmd == "version":
            emit(
                {
                    **build_base_payload(ctx),
                    "litdoc_version": __version__,
                    "python_version": platform.python_version(),
                },
                as_json,
            )
            return OK
        if ns.cmd == "config":
            payload = build_base_payload(ctx)
            payload["resolved"] = {
                **dataclasses.asdict(ctx.config),
                "source": str(ctx.config.source) if ctx.config.source else None,
            }
            emit(payload, as_json)
            return OK
        if ns.cmd == "run":
            return _import_attr("litdoc.commands.run", "run_command")(ctx, ns)
        return ERR_USAGE
    except ScriptError as exc:
        print(render_error(as_json=(fmt == "json"), message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        log_event(ctx, "error", "cli", "internal_error", error=str(exc))
        print(render_error(as_json=(fmt == "json"), message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
