from __future__ import annotations

import time
from typing import Any, Iterable

from .models import CapturedStatement, CaptureKind, ConsoleKind, ConsoleOutput, Statement


class CaptureRecorder:
    """Collects captures for one fragment against the statement being evaluated.

    `line` always points at the last physical line of the top-level
    statement in flight; every capture attaches there. Once indexed, the
    indexer's statement positions decide that line; statements it does not
    report fall back to the evaluator's own node position.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.line = 0
        self.column = 0
        self.captures: list[CapturedStatement] = []
        self.console: list[ConsoleOutput] = []
        self._anchors: dict[tuple[int, int], Statement] = {}

    def index(self, statements: Iterable[Statement]) -> None:
        self._anchors = {(s.line, s.column): s for s in statements}

    def enter(self, line: int, column: int = 0) -> None:
        self.line = line
        self.column = column

    def enter_statement(self, start: int, end: int, column: int = 0) -> None:
        anchor = self._anchors.get((start, column))
        if anchor is None:
            self.enter(end, column)
        else:
            self.enter(anchor.end_line, anchor.column)

    def result(self, value: Any) -> None:
        if self.enabled:
            self.captures.append(CapturedStatement(self.line, self.column, value, CaptureKind.RESULT))

    def assertion(self, passed: bool, message: str) -> None:
        if self.enabled:
            self.captures.append(
                CapturedStatement(
                    self.line,
                    self.column,
                    message,
                    CaptureKind.ASSERTION,
                    assertion_passed=passed,
                    assertion_message=message,
                )
            )

    def error(self, message: str) -> None:
        if self.enabled:
            self.captures.append(CapturedStatement(self.line, self.column, message, CaptureKind.ERROR))

    def console_output(self, kind: ConsoleKind, text: str) -> None:
        self.console.append(ConsoleOutput(kind=kind, text=text, line=self.line, timestamp=time.time()))
