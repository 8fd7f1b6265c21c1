from __future__ import annotations

from pathlib import PurePath
from typing import Any, Iterable, Sequence

from ..contracts import validate_self
from ..core.context import RunContext
from .models import TestSummary

REPORT_SCHEMA = "litdoc.report.v1"
REPORT_SCHEMA_VERSION = 1


def _rate(numerator: int, denominator: int, empty: int) -> int:
    if denominator <= 0:
        return empty
    return round(numerator / denominator * 100)


def format_test_results(summaries: Sequence[TestSummary]) -> str:
    lines = ["Document test results", ""]
    for summary in summaries:
        lines.append(PurePath(summary.file).name)
        lines.append(
            f"  blocks: {summary.passed}/{summary.block_count} passed ({_rate(summary.passed, summary.block_count, 0)}%)"
        )
        if summary.assertion_count:
            rate = _rate(summary.assertions_passed, summary.assertion_count, 100)
            lines.append(f"  assertions: {summary.assertions_passed}/{summary.assertion_count} passed ({rate}%)")
        if summary.failed:
            lines.append(f"  failed blocks: {summary.failed}")
        lines.append("")
    total = TestSummary.aggregate(summaries)
    if total.block_count:
        lines.append(
            f"overall: {total.passed}/{total.block_count} blocks passed ({_rate(total.passed, total.block_count, 0)}%)"
        )
        if total.assertion_count:
            rate = _rate(total.assertions_passed, total.assertion_count, 100)
            lines.append(f"assertions: {total.assertions_passed}/{total.assertion_count} passed ({rate}%)")
    lines.append(f"status: {'pass' if total.ok else 'fail'}")
    return "\n".join(lines)


def build_report_payload(
    ctx: RunContext,
    summaries: Sequence[TestSummary],
    updated: Iterable[str] = (),
) -> dict[str, Any]:
    total = TestSummary.aggregate(summaries)
    payload: dict[str, Any] = {
        "schema_name": REPORT_SCHEMA,
        "schema_version": REPORT_SCHEMA_VERSION,
        "tool": "litdoc",
        "status": "pass" if total.ok else "fail",
        "run_id": ctx.run_id,
        "documents": [summary.as_dict() for summary in summaries],
        "totals": total.as_dict(),
        "updated": sorted(updated),
    }
    return validate_self(REPORT_SCHEMA, payload)
