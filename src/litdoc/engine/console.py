"""Process-wide interception of stdout, stderr and root logging.

Only one fragment may own the interception at a time. The guard is a
singleton; `intercept()` restores every replaced surface on all exit paths.
"""

from __future__ import annotations

import io
import logging
import sys
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, TextIO

from .models import ConsoleKind

Sink = Callable[[ConsoleKind, str], None]

_LEVEL_KINDS = (
    (logging.ERROR, ConsoleKind.ERROR),
    (logging.WARNING, ConsoleKind.WARN),
    (logging.INFO, ConsoleKind.INFO),
)


def kind_for_level(levelno: int) -> ConsoleKind:
    for threshold, kind in _LEVEL_KINDS:
        if levelno >= threshold:
            return kind
    return ConsoleKind.DEBUG


class _StreamTee(io.TextIOBase):
    def __init__(self, target: TextIO, kind: ConsoleKind, sink: Sink, echo: bool) -> None:
        self._target = target
        self._kind = kind
        self._sink = sink
        self._echo = echo
        self._pending = ""

    @property
    def encoding(self) -> str:  # type: ignore[override]
        return getattr(self._target, "encoding", None) or "utf-8"

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        if self._echo:
            self._target.write(text)
        self._pending += text
        while "\n" in self._pending:
            line, self._pending = self._pending.split("\n", 1)
            self._sink(self._kind, line)
        return len(text)

    def flush(self) -> None:
        if self._echo:
            self._target.flush()

    def drain(self) -> None:
        if self._pending:
            self._sink(self._kind, self._pending)
            self._pending = ""


class _RecordHandler(logging.Handler):
    def __init__(self, sink: Sink) -> None:
        super().__init__(level=logging.NOTSET)
        self._sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)
        self._sink(kind_for_level(record.levelno), message)


class ConsoleInterceptor:
    _instance: "ConsoleInterceptor | None" = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: int | None = None

    @classmethod
    def instance(cls) -> "ConsoleInterceptor":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @property
    def active(self) -> bool:
        return self._owner is not None

    @contextmanager
    def intercept(self, sink: Sink, echo: bool = False) -> Iterator["ConsoleInterceptor"]:
        if self._owner == threading.get_ident():
            raise RuntimeError("console interception is already installed by this thread")
        with self._lock:
            self._owner = threading.get_ident()
            saved_out, saved_err = sys.stdout, sys.stderr
            out = _StreamTee(saved_out, ConsoleKind.LOG, sink, echo)
            err = _StreamTee(saved_err, ConsoleKind.ERROR, sink, echo)
            handler = _RecordHandler(sink)
            root = logging.getLogger()
            sys.stdout, sys.stderr = out, err
            root.addHandler(handler)
            try:
                yield self
            finally:
                root.removeHandler(handler)
                sys.stdout, sys.stderr = saved_out, saved_err
                out.drain()
                err.drain()
                self._owner = None
