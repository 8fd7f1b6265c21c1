from __future__ import annotations

import re
from typing import Any, Callable

from ..core.errors import AssertionFailure
from .capture import CaptureRecorder
from .formatter import FormatOptions, format_output

_OPTIONS = FormatOptions(compact=True)


def _show(value: Any) -> str:
    return format_output(value, _OPTIONS)


class Expectation:
    """Fluent checks over one value; every call records a verdict."""

    def __init__(self, actual: Any, recorder: CaptureRecorder, negated: bool = False) -> None:
        self.actual = actual
        self._recorder = recorder
        self._negated = negated

    @property
    def not_(self) -> "Expectation":
        return Expectation(self.actual, self._recorder, negated=not self._negated)

    def _verdict(self, passed: bool, matcher: str, expected: Any = None, show_expected: bool = True) -> None:
        passed = bool(passed) != self._negated
        call = f"{'not_.' if self._negated else ''}{matcher}"
        argument = _show(expected) if show_expected else ""
        if passed:
            message = f"expect({_show(self.actual)}).{call}({argument})"
        else:
            wording = matcher.replace("_", " ")
            if self._negated:
                wording = f"not {wording}"
            message = f"Assertion failed: expected {_show(self.actual)} {wording}"
            if show_expected:
                message = f"{message} {argument}"
        self._recorder.assertion(passed, message)
        if not passed:
            raise AssertionFailure(message, line=self._recorder.line)

    def to_be(self, expected: Any) -> None:
        self._verdict(self.actual is expected or self.actual == expected, "to_be", expected)

    def to_equal(self, expected: Any) -> None:
        self._verdict(self.actual == expected, "to_equal", expected)

    def to_contain(self, item: Any) -> None:
        try:
            contained = item in self.actual
        except TypeError:
            contained = False
        self._verdict(contained, "to_contain", item)

    def to_be_greater_than(self, bound: Any) -> None:
        self._verdict(self.actual > bound, "to_be_greater_than", bound)

    def to_be_less_than(self, bound: Any) -> None:
        self._verdict(self.actual < bound, "to_be_less_than", bound)

    def to_be_truthy(self) -> None:
        self._verdict(bool(self.actual), "to_be_truthy", show_expected=False)

    def to_be_falsy(self) -> None:
        self._verdict(not self.actual, "to_be_falsy", show_expected=False)

    def to_be_defined(self) -> None:
        self._verdict(self.actual is not None, "to_be_defined", show_expected=False)

    def to_be_none(self) -> None:
        self._verdict(self.actual is None, "to_be_none", show_expected=False)

    def to_match(self, pattern: str) -> None:
        matched = isinstance(self.actual, str) and re.search(pattern, self.actual) is not None
        self._verdict(matched, "to_match", pattern)

    def to_have_length(self, length: int) -> None:
        try:
            actual_length = len(self.actual)
        except TypeError:
            actual_length = None
        self._verdict(actual_length == length, "to_have_length", length)

    def to_raise(self, exc_type: type[BaseException] = Exception) -> None:
        if not callable(self.actual):
            raise TypeError("to_raise() needs a callable")
        raised = False
        try:
            self.actual()
        except exc_type:
            raised = True
        self._verdict(raised, "to_raise", exc_type.__name__)


def make_expect(recorder: CaptureRecorder) -> Callable[[Any], Expectation]:
    def expect(actual: Any) -> Expectation:
        return Expectation(actual, recorder)

    return expect
