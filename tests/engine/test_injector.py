from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from litdoc.engine.formatter import FormatOptions
from litdoc.engine.injector import inject_outputs, strip_annotations
from litdoc.engine.models import CapturedStatement, CaptureKind

COMPACT = FormatOptions(compact=True)


def _result(line: int, value: object) -> CapturedStatement:
    return CapturedStatement(line, 0, value, CaptureKind.RESULT)


def test_single_capture_adds_one_line_one_level_deeper() -> None:
    code = "x = 5\nprint(x * 2)"
    assert inject_outputs(code, [_result(2, 10)], COMPACT) == "x = 5\nprint(x * 2)\n    # => 10"


def test_indentation_follows_the_captured_line() -> None:
    code = "if True:\n  value = 1\n  value"
    out = inject_outputs(code, [_result(3, 1)], FormatOptions(compact=True, indent_size=2))
    assert out.split("\n")[3] == "    # => 1"


def test_assertion_and_error_rendering() -> None:
    captures = [
        CapturedStatement(1, 0, "ok", CaptureKind.ASSERTION, assertion_passed=True, assertion_message="expect(2).to_be(2)"),
        CapturedStatement(2, 0, "bad", CaptureKind.ASSERTION, assertion_passed=False, assertion_message="nope"),
        CapturedStatement(3, 0, "ZeroDivisionError: division by zero", CaptureKind.ERROR),
    ]
    out = inject_outputs("a\nb\nc", captures, COMPACT).split("\n")
    assert out == [
        "a",
        "    # ✅ expect(2).to_be(2)",
        "b",
        "    # ❌ nope",
        "c",
        "    # ❌ Error: ZeroDivisionError: division by zero",
    ]


def test_multiline_values_use_header_and_continuation_rows() -> None:
    out = inject_outputs("data", [_result(1, {"a": 1})], FormatOptions(compact=False))
    assert out.split("\n") == ["data", "    # =>", "    #   {", '    #     "a": 1', "    #   }"]


def test_captures_on_one_line_keep_append_order() -> None:
    out = inject_outputs("go()", [_result(1, 1), _result(1, 2)], COMPACT)
    assert out.split("\n")[1:] == ["    # => 1", "    # => 2"]


def test_captures_outside_the_fragment_are_ignored() -> None:
    assert inject_outputs("x", [_result(0, 1), _result(9, 2)], COMPACT) == "x"


def test_strip_removes_every_injected_form() -> None:
    annotated = inject_outputs(
        "x = {'a': 1}\nx",
        [_result(2, {"a": 1}), CapturedStatement(2, 0, "m", CaptureKind.ASSERTION, True, "m")],
        FormatOptions(compact=False),
    )
    assert strip_annotations(annotated) == "x = {'a': 1}\nx"


def test_strip_keeps_ordinary_comments() -> None:
    code = "# setup\nx = 1  # inline\n#   indented note"
    assert strip_annotations(code) == code


def test_strip_supports_other_comment_tokens() -> None:
    assert strip_annotations("x\n    // => 1", comment_prefix="//") == "x"


@given(st.lists(st.integers(min_value=-5, max_value=5), min_size=1, max_size=8))
def test_inject_then_strip_round_trips_source(values: list[int]) -> None:
    code = "\n".join(f"v{i} = {v}" for i, v in enumerate(values))
    captures = [_result(i + 1, v) for i, v in enumerate(values)]
    injected = inject_outputs(code, captures, COMPACT)
    assert len(injected.split("\n")) == 2 * len(values)
    assert strip_annotations(injected) == code


def test_multiline_messages_keep_every_row_commented() -> None:
    captures = [
        CapturedStatement(1, 0, "ValueError: first\nsecond", CaptureKind.ERROR),
        CapturedStatement(2, 0, "x ==\n        1", CaptureKind.ASSERTION, assertion_passed=True, assertion_message="x ==\n        1"),
    ]
    out = inject_outputs("a\nb", captures, COMPACT)
    assert out.split("\n") == [
        "a",
        "    # ❌ Error: ValueError: first",
        "    #   second",
        "b",
        "    # ✅ x ==",
        "    #           1",
    ]
    assert strip_annotations(out) == "a\nb"


def test_comments_at_the_code_indent_survive_after_an_annotation() -> None:
    code = "x = 1\nx\n#   keep me"
    injected = inject_outputs(code, [_result(2, 1)], COMPACT)
    assert strip_annotations(injected) == code
