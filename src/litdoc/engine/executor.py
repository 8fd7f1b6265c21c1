"""Single-fragment execution and the sequence helpers built on it."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Iterable, Mapping

from ..adapters.markdown import extract_code_blocks
from ..core.context import RunContext
from ..core.errors import AssertionFailure, ExecutionFailure, ExecutionTimeout, TranspileFailure
from ..core.runtime.logging import log_event
from .capture import CaptureRecorder
from .console import ConsoleInterceptor
from .context import ExecutionContextFactory
from .evaluator import Evaluator, PythonEvaluator
from .indexer import PythonStatementIndexer, StatementIndexer
from .models import CodeBlock, ExecutionResult
from .state import SharedState
from .transpile import PYTHON_LANGUAGES, SUPPORTED_LANGUAGES, transpile

TEST_CONTEXT = "test"


def _describe(exc: BaseException) -> str:
    if isinstance(exc, ExecutionFailure):
        return exc.message
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


async def _bounded(run: Awaitable[Any], timeout: float, recorder: CaptureRecorder) -> Any:
    """Await `run` for at most `timeout` seconds.

    Cancellation only lands at an `await`, so a fragment that blocks without
    yielding runs past the deadline. A `TimeoutError` raised by the fragment
    itself propagates unchanged.
    """
    try:
        async with asyncio.timeout(timeout) as window:
            return await run
    except TimeoutError as exc:
        if not window.expired():
            raise
        raise ExecutionTimeout(f"Execution timed out after {timeout}s", line=recorder.line) from exc


class BlockExecutor:
    def __init__(
        self,
        evaluator: Evaluator | None = None,
        indexer: StatementIndexer | None = None,
        context_factory: ExecutionContextFactory | None = None,
        ctx: RunContext | None = None,
        echo: bool = False,
    ) -> None:
        self.evaluator = evaluator or PythonEvaluator()
        self.indexer = indexer or PythonStatementIndexer(ctx)
        self.context_factory = context_factory or ExecutionContextFactory(ctx=ctx)
        self.interceptor = ConsoleInterceptor.instance()
        self._ctx = ctx
        self._echo = echo
        self._lock = asyncio.Lock()

    async def execute(
        self,
        block: CodeBlock,
        state: SharedState,
        *,
        execution_context: str | None = None,
        extra: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> ExecutionResult:
        started = time.perf_counter()
        language = block.language.lower()
        if language not in SUPPORTED_LANGUAGES:
            return ExecutionResult(success=False, duration=0.0, error=f"Unsupported language: {block.language}")

        recorder = CaptureRecorder(enabled=block.captures_statements)
        try:
            source = transpile(block.value, language)
        except TranspileFailure as exc:
            return ExecutionResult(success=False, duration=time.perf_counter() - started, error=exc.message)
        if block.captures_statements:
            statements = self.indexer.index(source)
            recorder.index(statements)
            log_event(self._ctx, "debug", "executor", "indexed", block=block.index, statements=len(statements))
        profile = self.context_factory.resolve_profile(block, execution_context)
        context = self.context_factory.build(state, recorder=recorder, profile=profile, extra=extra)
        filename = f"<litdoc:{state.document_id}#{block.index}>"

        result: Any = None
        error: str | None = None
        error_line: int | None = None
        async with self._lock:
            with self.interceptor.intercept(recorder.console_output, echo=self._echo):
                try:
                    run = self.evaluator.run(source, context.namespace, recorder, filename)
                    if timeout:
                        result = await _bounded(run, timeout, recorder)
                    else:
                        result = await run
                except Exception as exc:  # fragment code may raise anything
                    error = _describe(exc)
                    error_line = exc.line if isinstance(exc, ExecutionFailure) and exc.line else recorder.line
                    if not isinstance(exc, AssertionFailure):
                        if error_line != recorder.line:
                            recorder.enter(error_line)
                        recorder.error(error)

        duration = time.perf_counter() - started
        if error is not None:
            log_event(self._ctx, "debug", "executor", "block_failed", block=block.index, line=error_line, error=error)
        return ExecutionResult(
            success=error is None,
            duration=duration,
            result=result,
            error=error,
            error_line=error_line,
            console_outputs=list(recorder.console),
            statement_captures=list(recorder.captures),
        )

    async def execute_blocks(
        self,
        blocks: Iterable[CodeBlock],
        state: SharedState,
        *,
        execution_context: str | None = None,
        timeout: float | None = None,
    ) -> list[ExecutionResult]:
        results: list[ExecutionResult] = []
        for block in blocks:
            results.append(await self.execute(block, state, execution_context=execution_context, timeout=timeout))
        return results

    async def execute_document(
        self,
        text: str,
        *,
        document_id: str = "<document>",
        execution_context: str | None = None,
        timeout: float | None = None,
    ) -> list[ExecutionResult]:
        """Run every Python fence of `text`, tagged or not.

        Fences that select the `test` profile only run when that profile is
        requested explicitly.
        """
        blocks = []
        for block in extract_code_blocks(text):
            if block.language.lower() not in PYTHON_LANGUAGES:
                continue
            if execution_context != TEST_CONTEXT and self.context_factory.resolve_profile(block) == TEST_CONTEXT:
                continue
            blocks.append(block)
        return await self.execute_blocks(
            blocks, SharedState(document_id), execution_context=execution_context, timeout=timeout
        )
