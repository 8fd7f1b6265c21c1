from __future__ import annotations

import argparse
import asyncio

from ..adapters.store import FileDocumentStore
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_IO
from ..core.runtime.logging import log_event
from ..core.runtime.serialize import dumps_json
from ..engine.report import build_report_payload, format_test_results
from ..engine.runner import DocumentTestRunner, exit_code_for


def run_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    store = FileDocumentStore(ctx.cwd)
    files = list(ns.files)
    missing = [name for name in files if not store.path_for(name).is_file()]
    if missing:
        raise ScriptError(f"document not found: {', '.join(missing)}", ERR_IO, "document_missing")
    runner = DocumentTestRunner(ctx, store)
    try:
        reports = asyncio.run(runner.run_documents(files))
    finally:
        runner.close()
    summaries = [report.summary for report in reports]
    updated = [report.summary.file for report in reports if report.changed]
    code = exit_code_for(summaries)
    log_event(ctx, "info", "cli", "run_finished", documents=len(summaries), updated=len(updated), exit_code=code)
    if ctx.output_format == "json":
        print(dumps_json(build_report_payload(ctx, summaries, updated)))
        return code
    print(format_test_results(summaries))
    for name in updated:
        print(f"updated: {name}")
    return code
