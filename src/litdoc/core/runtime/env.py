"""Centralized environment variable helpers."""

from __future__ import annotations

import os


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def snapshot(overlay: dict[str, str] | None = None) -> dict[str, str]:
    env = dict(os.environ)
    env.update(overlay or {})
    return env
