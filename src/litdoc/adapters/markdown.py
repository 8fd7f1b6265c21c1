"""Fenced code block scanning for Markdown and MDX documents."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..engine.models import CodeBlock

_OPEN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


@dataclass(frozen=True)
class Fence:
    block: CodeBlock
    indent: int
    start: int
    end: int


def _dedent(line: str, indent: int) -> str:
    strip = min(indent, len(line) - len(line.lstrip(" ")))
    return line[strip:]


def scan_fences(text: str) -> list[Fence]:
    """All fences in document order; `start`/`end` bound the content lines."""
    lines = text.split("\n")
    fences: list[Fence] = []
    cursor = 0
    while cursor < len(lines):
        match = _OPEN.match(lines[cursor])
        if match is None or (match.group("fence")[0] == "`" and "`" in match.group("info")):
            cursor += 1
            continue
        fence = match.group("fence")
        indent = len(match.group("indent"))
        info = match.group("info").strip().split(None, 1)
        closer = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}\s*$")
        end = cursor + 1
        while end < len(lines) and not closer.match(lines[end]):
            end += 1
        body = [_dedent(line, indent) for line in lines[cursor + 1 : end]]
        block = CodeBlock(
            language=info[0] if info else "",
            value="\n".join(body),
            meta=info[1] if len(info) > 1 else "",
            index=len(fences),
        )
        fences.append(Fence(block=block, indent=indent, start=cursor + 1, end=end))
        cursor = end + 1
    return fences


def extract_code_blocks(text: str) -> list[CodeBlock]:
    return [fence.block for fence in scan_fences(text)]


def replace_block(text: str, index: int, code: str) -> str:
    fences = scan_fences(text)
    if not 0 <= index < len(fences):
        raise IndexError(f"no fenced block at index {index}")
    fence = fences[index]
    lines = text.split("\n")
    pad = " " * fence.indent
    body = [pad + line if line else line for line in code.split("\n")] if code or fence.end > fence.start else []
    return "\n".join(lines[: fence.start] + body + lines[fence.end :])
