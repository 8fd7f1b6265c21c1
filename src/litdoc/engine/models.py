from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

CAPTURE_TAGS = frozenset({"doc", "assert"})


class CaptureKind(str, Enum):
    RESULT = "result"
    ASSERTION = "assertion"
    ERROR = "error"


class ConsoleKind(str, Enum):
    LOG = "log"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


@dataclass(frozen=True)
class CodeBlock:
    language: str
    value: str
    meta: str = ""
    index: int = 0

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(token for token in self.meta.split() if "=" not in token)

    @property
    def captures_statements(self) -> bool:
        return bool(self.tags & CAPTURE_TAGS)

    def meta_option(self, key: str) -> str | None:
        prefix = f"{key}="
        for token in self.meta.split():
            if token.startswith(prefix):
                return token[len(prefix):] or None
        return None

    def with_value(self, value: str) -> "CodeBlock":
        return CodeBlock(language=self.language, value=value, meta=self.meta, index=self.index)


@dataclass(frozen=True)
class Statement:
    line: int
    column: int
    text: str
    end_line: int
    kind: str = "expression"


@dataclass
class CapturedStatement:
    line: int
    column: int
    output: Any
    kind: CaptureKind
    assertion_passed: bool | None = None
    assertion_message: str | None = None


@dataclass(frozen=True)
class ConsoleOutput:
    kind: ConsoleKind
    text: str
    line: int
    timestamp: float


@dataclass
class ExecutionResult:
    success: bool
    duration: float
    result: Any = None
    error: str | None = None
    error_line: int | None = None
    console_outputs: list[ConsoleOutput] = field(default_factory=list)
    statement_captures: list[CapturedStatement] = field(default_factory=list)

    @property
    def assertions(self) -> list[CapturedStatement]:
        return [c for c in self.statement_captures if c.kind is CaptureKind.ASSERTION]


@dataclass
class TestSummary:
    __test__ = False

    file: str
    block_count: int = 0
    passed: int = 0
    failed: int = 0
    assertion_count: int = 0
    assertions_passed: int = 0
    assertions_failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.assertions_failed == 0

    def record(self, result: ExecutionResult) -> None:
        if result.success:
            self.passed += 1
        else:
            self.failed += 1
            if result.error:
                self.errors.append(result.error)
        for capture in result.assertions:
            self.assertion_count += 1
            if capture.assertion_passed:
                self.assertions_passed += 1
            else:
                self.assertions_failed += 1

    def as_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "blocks": self.block_count,
            "passed": self.passed,
            "failed": self.failed,
            "assertions": self.assertion_count,
            "assertions_passed": self.assertions_passed,
            "assertions_failed": self.assertions_failed,
            "status": "pass" if self.ok else "fail",
            "errors": list(self.errors),
        }

    @classmethod
    def aggregate(cls, summaries: Iterable["TestSummary"], file: str = "<total>") -> "TestSummary":
        total = cls(file=file)
        for summary in summaries:
            total.block_count += summary.block_count
            total.passed += summary.passed
            total.failed += summary.failed
            total.assertion_count += summary.assertion_count
            total.assertions_passed += summary.assertions_passed
            total.assertions_failed += summary.assertions_failed
            total.errors.extend(summary.errors)
        return total
