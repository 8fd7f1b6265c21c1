"""Deterministic value rendering for annotations and assertion messages."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

PREVIEW_ITEMS = 3
NESTED_MAX_LENGTH = 20
FUNCTION_PLACEHOLDER = "[Function]"


@dataclass(frozen=True)
class FormatOptions:
    compact: bool = False
    max_length: int = 80
    indent_size: int = 4


def _quote(text: str, options: FormatOptions) -> str:
    quoted = json.dumps(text, ensure_ascii=False)
    if options.compact and len(quoted) > options.max_length:
        return quoted[: options.max_length - 4] + '..."'
    return quoted


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=lambda item: format_output(item, FormatOptions(compact=True)))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return format_output(value, FormatOptions(compact=True))


def _nested(value: Any) -> str:
    return format_output(value, FormatOptions(compact=True, max_length=NESTED_MAX_LENGTH))


def _suffix(total: int) -> str:
    return f", ... {total - PREVIEW_ITEMS} more" if total > PREVIEW_ITEMS else ""


def _format_sequence(items: list[Any], open_: str, close: str, options: FormatOptions) -> str:
    if not items:
        return f"{open_}{close}"
    if options.compact:
        preview = ", ".join(_nested(item) for item in items[:PREVIEW_ITEMS])
        return f"{open_}{preview}{_suffix(len(items))}{close}"
    try:
        return json.dumps(items, indent=2, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError):
        return _format_sequence(items, open_, close, FormatOptions(compact=True, max_length=options.max_length))


def _format_mapping(value: dict[Any, Any], options: FormatOptions) -> str:
    if not value:
        return "{}"
    if options.compact:
        keys = list(value)
        preview = ", ".join(f"{k}: {_nested(value[k])}" for k in keys[:PREVIEW_ITEMS])
        return f"{{{preview}{_suffix(len(keys))}}}"
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError):
        return format_output(value, FormatOptions(compact=True, max_length=options.max_length))


def format_output(value: Any, options: FormatOptions | None = None) -> str:
    """Render `value`; a value whose own hooks raise renders as a placeholder."""
    opts = options or FormatOptions()
    try:
        return _render(value, opts)
    except Exception:  # user-defined __str__, __eq__ or field copies may raise
        return f"<unrenderable {type(value).__name__}>"


def _render(value: Any, opts: FormatOptions) -> str:
    if value is None:
        return "None"
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _quote(value, opts)
    if isinstance(value, (list, tuple)):
        open_, close = ("(", ")") if isinstance(value, tuple) and opts.compact else ("[", "]")
        return _format_sequence(list(value), open_, close, opts)
    if isinstance(value, (set, frozenset)):
        ordered = sorted(value, key=_nested)
        open_, close = ("{", "}") if opts.compact else ("[", "]")
        return _format_sequence(ordered, open_, close, opts)
    if isinstance(value, dict):
        return _format_mapping(value, opts)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseException):
        return f"Error: {value}"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _format_mapping(dataclasses.asdict(value), opts)
    if callable(value):
        return FUNCTION_PLACEHOLDER
    return str(value)
