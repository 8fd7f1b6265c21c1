"""Canonical JSON serialization helpers."""

from __future__ import annotations

import json
from typing import Any, Callable


def dumps_json(payload: Any, pretty: bool = False, default: Callable[[Any], Any] | None = None) -> str:
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=default)
    return json.dumps(payload, sort_keys=True, ensure_ascii=False, default=default)
