"""Textual splice of capture annotations into fragment source.

Lines are addressed by the 1-indexed positions the recorder attached; the
source is never re-parsed here.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Iterable

from .formatter import FormatOptions, format_output
from .models import CapturedStatement, CaptureKind

RESULT_MARK = "=>"
PASS_MARK = "✅"
FAIL_MARK = "❌"
CONTINUATION_INDENT = "  "


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _rows(comment_prefix: str, head: str, text: str) -> list[str]:
    first, *rest = text.split("\n")
    header = f"{comment_prefix} {head} {first}".rstrip() if first else f"{comment_prefix} {head}"
    return [header] + [f"{comment_prefix} {CONTINUATION_INDENT}{row}".rstrip() for row in rest]


def render_capture(capture: CapturedStatement, options: FormatOptions, comment_prefix: str = "#") -> list[str]:
    """Comment rows for one capture; every physical line carries the prefix."""
    if capture.kind is CaptureKind.ASSERTION:
        mark = PASS_MARK if capture.assertion_passed else FAIL_MARK
        return _rows(comment_prefix, mark, str(capture.assertion_message or capture.output))
    if capture.kind is CaptureKind.ERROR:
        return _rows(comment_prefix, f"{FAIL_MARK} Error:", str(capture.output))
    rendered = format_output(capture.output, options).split("\n")
    if len(rendered) == 1:
        return [f"{comment_prefix} {RESULT_MARK} {rendered[0]}"]
    return [f"{comment_prefix} {RESULT_MARK}"] + [f"{comment_prefix} {CONTINUATION_INDENT}{row}".rstrip() for row in rendered]


def inject_outputs(
    code: str,
    captures: Iterable[CapturedStatement],
    options: FormatOptions | None = None,
    comment_prefix: str = "#",
) -> str:
    opts = options or FormatOptions()
    lines = code.split("\n")
    by_line: dict[int, list[CapturedStatement]] = defaultdict(list)
    for capture in captures:
        if 1 <= capture.line <= len(lines):
            by_line[capture.line].append(capture)
    if not by_line:
        return code
    out: list[str] = []
    for number, line in enumerate(lines, start=1):
        out.append(line)
        pending = by_line.get(number)
        if not pending:
            continue
        indent = _indent_of(line) + " " * opts.indent_size
        for capture in pending:
            out.extend(indent + row for row in render_capture(capture, opts, comment_prefix))
    return "\n".join(out)


def _annotation_pattern(comment_prefix: str) -> re.Pattern[str]:
    marks = "|".join(re.escape(mark) for mark in (RESULT_MARK, PASS_MARK, FAIL_MARK))
    return re.compile(rf"^\s*{re.escape(comment_prefix)} (?:{marks})(?:\s|$)")


def strip_annotations(code: str, comment_prefix: str = "#") -> str:
    """Drop injected annotation lines and the continuation rows under them.

    A continuation row shares its header's indentation, so ordinary comments
    at the code's own indent survive.
    """
    head = _annotation_pattern(comment_prefix)
    continuation = re.compile(rf"^{re.escape(comment_prefix)}(?: {CONTINUATION_INDENT}.*)?$")
    kept: list[str] = []
    header_indent: str | None = None
    for line in code.split("\n"):
        if head.match(line):
            header_indent = _indent_of(line)
            continue
        indent = _indent_of(line)
        if header_indent is not None and indent == header_indent and continuation.match(line[len(indent):]):
            continue
        header_indent = None
        kept.append(line)
    return "\n".join(kept)
