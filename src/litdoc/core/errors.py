from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_INTERNAL


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class ParseFailure(Exception):
    """Fragment source could not be parsed into an AST."""


class ExecutionFailure(Exception):
    """A fragment raised while it was being evaluated."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        return self.message


class AssertionFailure(ExecutionFailure, AssertionError):
    """Raised by the assertion helper after recording a failed verdict."""


class TranspileFailure(ExecutionFailure):
    pass


class ExecutionTimeout(ExecutionFailure):
    pass


class SdkError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
