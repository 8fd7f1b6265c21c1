"""Statement-at-a-time evaluation of fragment source.

The namespace dict doubles as the globals of every compiled statement, so
bindings resolve as free names and assignments persist across statements.
Each top-level node is compiled on its own with top-level await enabled;
a coroutine result is awaited before the next node starts.
"""

from __future__ import annotations

import __future__
import ast
import inspect
import linecache
from collections import OrderedDict
from typing import Any, Protocol

from ..core.errors import AssertionFailure, ExecutionFailure
from .capture import CaptureRecorder

PyCF_ALLOW_TOP_LEVEL_AWAIT = getattr(ast, "PyCF_ALLOW_TOP_LEVEL_AWAIT", 0x2000)
LINECACHE_CAPACITY = 128


class Evaluator(Protocol):
    async def run(self, source: str, namespace: dict[str, Any], recorder: CaptureRecorder, filename: str) -> Any: ...


class PythonEvaluator:
    def __init__(self, linecache_capacity: int = LINECACHE_CAPACITY) -> None:
        self._capacity = linecache_capacity
        self._registered: OrderedDict[str, None] = OrderedDict()

    async def run(
        self,
        source: str,
        namespace: dict[str, Any],
        recorder: CaptureRecorder,
        filename: str = "<litdoc>",
    ) -> Any:
        try:
            module = ast.parse(source, filename=filename, mode="exec")
        except SyntaxError as exc:
            raise ExecutionFailure(f"SyntaxError: {exc.msg} (line {exc.lineno})", line=exc.lineno) from exc
        self._register(filename, source)
        flags = PyCF_ALLOW_TOP_LEVEL_AWAIT
        for node in module.body:
            recorder.enter_statement(node.lineno, node.end_lineno or node.lineno, node.col_offset)
            if isinstance(node, ast.Return):
                if node.value is None:
                    return None
                return await self._eval(node.value, namespace, filename, flags)
            if isinstance(node, ast.Expr):
                value = await self._eval(node.value, namespace, filename, flags)
                if value is not None:
                    recorder.result(value)
                continue
            if isinstance(node, ast.Assert):
                await self._check(node, source, namespace, recorder, filename, flags)
                continue
            await self._exec(node, namespace, filename, flags)
            if isinstance(node, ast.ImportFrom) and node.module == "__future__":
                flags |= _future_flags(node)
        return None

    async def _check(
        self,
        node: ast.Assert,
        source: str,
        namespace: dict[str, Any],
        recorder: CaptureRecorder,
        filename: str,
        flags: int,
    ) -> None:
        passed = bool(await self._eval(node.test, namespace, filename, flags))
        if node.msg is not None and not passed:
            message = str(await self._eval(node.msg, namespace, filename, flags))
        else:
            message = ast.get_source_segment(source, node.test) or "assertion"
        recorder.assertion(passed, message)
        if not passed:
            raise AssertionFailure(message, line=recorder.line)

    async def _eval(self, node: ast.expr, namespace: dict[str, Any], filename: str, flags: int) -> Any:
        code = compile(ast.Expression(body=node), filename, "eval", flags=flags, dont_inherit=True)
        value = eval(code, namespace)
        if code.co_flags & inspect.CO_COROUTINE:
            value = await value
        return value

    async def _exec(self, node: ast.stmt, namespace: dict[str, Any], filename: str, flags: int) -> None:
        code = compile(ast.Module(body=[node], type_ignores=[]), filename, "exec", flags=flags, dont_inherit=True)
        outcome = eval(code, namespace)
        if code.co_flags & inspect.CO_COROUTINE:
            await outcome

    def _register(self, filename: str, source: str) -> None:
        linecache.cache[filename] = (len(source), None, source.splitlines(keepends=True), filename)
        self._registered[filename] = None
        self._registered.move_to_end(filename)
        while len(self._registered) > self._capacity:
            old, _ = self._registered.popitem(last=False)
            linecache.cache.pop(old, None)


def _future_flags(node: ast.ImportFrom) -> int:
    flags = 0
    for alias in node.names:
        flags |= getattr(getattr(__future__, alias.name, None), "compiler_flag", 0)
    return flags
