"""Document-level orchestration: extract, execute in order, report, persist."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..adapters.markdown import extract_code_blocks, replace_block
from ..adapters.store import DocumentStore, FileDocumentStore
from ..core.context import RunContext
from ..core.exit_codes import ERR_TESTS, OK
from ..core.runtime.logging import log_event
from .context import ExecutionContextFactory
from .executor import BlockExecutor
from .formatter import FormatOptions
from .injector import inject_outputs, strip_annotations
from .models import CodeBlock, ExecutionResult, TestSummary
from .sdk import SdkRuntime
from .state import SharedStateRegistry


@dataclass
class DocumentReport:
    summary: TestSummary
    text: str
    updated_text: str | None = None

    @property
    def changed(self) -> bool:
        return self.updated_text is not None and self.updated_text != self.text


def build_executor(ctx: RunContext) -> BlockExecutor:
    sdk = SdkRuntime(ctx.config.sdk, skip_auth=ctx.skip_auth, ctx=ctx)
    factory = ExecutionContextFactory(
        ctx.config.contexts,
        sdk_runtime=sdk,
        ctx=ctx,
        default_profile=ctx.config.default_context,
    )
    return BlockExecutor(context_factory=factory, ctx=ctx)


class DocumentTestRunner:
    __test__ = False

    def __init__(
        self,
        ctx: RunContext,
        store: DocumentStore | None = None,
        executor: BlockExecutor | None = None,
        comment_prefix: str = "#",
    ) -> None:
        self.ctx = ctx
        self.store = store or FileDocumentStore(ctx.cwd)
        self.executor = executor or build_executor(ctx)
        self.states = SharedStateRegistry()
        self.comment_prefix = comment_prefix
        fmt = ctx.config.format
        self.format_options = FormatOptions(compact=fmt.compact, max_length=fmt.max_length, indent_size=fmt.indent_size)

    def select_blocks(self, text: str) -> list[CodeBlock]:
        tags = frozenset(self.ctx.config.tags)
        return [block for block in extract_code_blocks(text) if block.tags & tags]

    def _progress(self, message: str) -> None:
        if self.ctx.verbose and self.ctx.output_format == "text":
            print(message, file=sys.stderr)

    async def _execute(self, block: CodeBlock, doc_id: str) -> ExecutionResult:
        state = self.states.for_document(doc_id)
        try:
            return await self.executor.execute(
                block,
                state,
                execution_context=self.ctx.execution_context,
                timeout=self.ctx.timeout,
            )
        except Exception as exc:  # executor bugs must not end the document
            log_event(self.ctx, "error", "runner", "executor_crashed", document=doc_id, block=block.index, error=str(exc))
            return ExecutionResult(success=False, duration=0.0, error=f"{type(exc).__name__}: {exc}")

    async def run_document(self, doc_id: str) -> DocumentReport:
        text = self.store.read(doc_id)
        blocks = self.select_blocks(text)
        summary = TestSummary(file=doc_id, block_count=len(blocks))
        log_event(self.ctx, "info", "runner", "document_started", document=doc_id, blocks=len(blocks))
        updated = text
        try:
            for position, block in enumerate(blocks, start=1):
                self._progress(f"[{position}/{len(blocks)}] executing block with meta: {block.meta}")
                stripped = strip_annotations(block.value, self.comment_prefix)
                result = await self._execute(block.with_value(stripped), doc_id)
                summary.record(result)
                if not result.success:
                    self._progress(f"  block {position} failed: {result.error}")
                if self.ctx.update:
                    code = inject_outputs(stripped, result.statement_captures, self.format_options, self.comment_prefix)
                    if code != block.value:
                        updated = replace_block(updated, block.index, code)
        finally:
            self.states.discard(doc_id)
        report = DocumentReport(summary=summary, text=text, updated_text=updated if self.ctx.update else None)
        if report.changed:
            self.store.write(doc_id, updated)
            log_event(self.ctx, "info", "runner", "document_updated", document=doc_id)
        log_event(
            self.ctx,
            "info",
            "runner",
            "document_finished",
            document=doc_id,
            passed=summary.passed,
            failed=summary.failed,
            assertions_failed=summary.assertions_failed,
        )
        return report

    async def run_documents(self, doc_ids: Iterable[str]) -> list[DocumentReport]:
        ids = list(doc_ids)
        if self.ctx.concurrency <= 1:
            return [await self.run_document(doc_id) for doc_id in ids]
        gate = asyncio.Semaphore(self.ctx.concurrency)

        async def bounded(doc_id: str) -> DocumentReport:
            async with gate:
                return await self.run_document(doc_id)

        return list(await asyncio.gather(*(bounded(doc_id) for doc_id in ids)))

    def close(self) -> None:
        self.executor.context_factory.sdk_runtime.close()


def exit_code_for(summaries: Sequence[TestSummary]) -> int:
    return OK if TestSummary.aggregate(summaries).ok else ERR_TESTS
