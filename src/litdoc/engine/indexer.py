"""Top-level statement positions for one fragment.

Indexing is a pure `ast` parse: nothing is evaluated, so annotations and
other syntax that would fail at runtime still index. Only the module body is
walked; function and class bodies stay opaque because annotations describe
example-level statements, not internals.
"""

from __future__ import annotations

import ast
from typing import Protocol

from ..core.context import RunContext
from ..core.errors import ParseFailure
from ..core.runtime.logging import log_event
from .models import Statement

_KINDS: dict[type[ast.stmt], str] = {
    ast.Expr: "expression",
    ast.Assign: "declaration",
    ast.AnnAssign: "declaration",
    ast.AugAssign: "declaration",
    ast.Return: "return",
    ast.Assert: "assertion",
}


class StatementIndexer(Protocol):
    def index(self, source: str) -> list[Statement]: ...


def statement_kind(node: ast.stmt) -> str | None:
    return _KINDS.get(type(node))


class PythonStatementIndexer:
    def __init__(self, ctx: RunContext | None = None) -> None:
        self._ctx = ctx

    def parse(self, source: str) -> ast.Module:
        try:
            return ast.parse(source, mode="exec")
        except (SyntaxError, ValueError) as exc:
            raise ParseFailure(str(exc)) from exc

    def index(self, source: str) -> list[Statement]:
        try:
            module = self.parse(source)
        except ParseFailure as exc:
            log_event(self._ctx, "debug", "indexer", "parse_failed", error=str(exc))
            return []
        statements: list[Statement] = []
        for node in module.body:
            kind = statement_kind(node)
            if kind is None:
                continue
            statements.append(
                Statement(
                    line=node.lineno,
                    column=node.col_offset,
                    text=ast.get_source_segment(source, node) or "",
                    end_line=node.end_lineno or node.lineno,
                    kind=kind,
                )
            )
        statements.sort(key=lambda s: (s.line, s.column))
        return statements


def parse_statements(source: str) -> list[Statement]:
    return PythonStatementIndexer().index(source)
