# ================================================================
# Light Processor - Ingestion Pipeline
# ================================================================
# Feeds large token streams to the registry in fixed-size batches,
# yielding to the event loop between batches
# ================================================================

import asyncio
import inspect
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from light_processor.config import BATCH_SIZE
from light_processor.errors import IngestionError
from light_processor.registry import WordRegistry
from light_processor.tokens import read_tokens


@dataclass
class IngestionReport:
    total_tokens: int
    tokens_processed: int = 0
    batches: int = 0
    cancelled: bool = False

    @property
    def progress(self) -> float:
        if self.total_tokens == 0:
            return 100.0
        return self.tokens_processed / self.total_tokens * 100.0

    def to_dict(self):
        return {
            "total_tokens": self.total_tokens,
            "tokens_processed": self.tokens_processed,
            "batches": self.batches,
            "cancelled": self.cancelled,
            "progress": self.progress,
        }


async def _report(on_progress, percent):
    # Callbacks may be plain functions or coroutine functions
    if on_progress is None:
        return
    result = on_progress(percent)
    if inspect.isawaitable(result):
        await result


class MutationQueue:
    """
    Single entry point for registry mutations.

    asyncio.Lock wakes waiters in FIFO order, so a prediction request
    and a file ingestion interleave batch by batch in arrival order.
    """

    def __init__(self, registry: WordRegistry):
        self.registry = registry
        self._lock = None
        self._loop = None

    def _get_lock(self):
        # One lock per event loop; asyncio.run() starts a fresh loop each call
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock, self._loop = asyncio.Lock(), loop
        return self._lock

    async def apply(self, tokens: Sequence[str]):
        async with self._get_lock():
            self.registry.add_tokens(tokens)

    async def run(self, fn, *args, **kwargs):
        """Run `fn` with exclusive access to the registry."""
        async with self._get_lock():
            return fn(*args, **kwargs)


class IngestionPipeline:
    """
    Batch-and-yield ingestion.

    Batches are consecutive, non-overlapping slices of `batch_size`
    tokens, so the pair straddling two batches is not counted.
    """

    def __init__(self, queue: MutationQueue, batch_size: int = BATCH_SIZE):
        self.queue = queue
        self.batch_size = batch_size

    async def ingest(self, tokens: Sequence[str], on_progress: Optional[Callable] = None,
                     cancel_event=None) -> IngestionReport:
        """
        Apply `tokens` batch by batch.

        on_progress(percent) is called once per batch, right after the batch
        is applied, and awaited when it returns an awaitable. `cancel_event`
        (anything with is_set()) is checked between batches only.
        """
        report = IngestionReport(total_tokens=len(tokens))
        await self._run(tokens, report, on_progress, cancel_event)
        return report

    async def _run(self, tokens, report, on_progress, cancel_event):
        total = report.total_tokens
        print(f"[Pipeline] Ingesting {total} tokens in batches of {self.batch_size}")

        if total == 0:
            await _report(on_progress, 100.0)

        for start in range(0, total, self.batch_size):
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                print(f"[Pipeline] Cancelled after {report.tokens_processed}/{total} tokens")
                return report

            batch = tokens[start:start + self.batch_size]
            await self.queue.apply(batch)
            report.tokens_processed += len(batch)
            report.batches += 1

            await _report(on_progress, report.progress)
            # Let the renderer / other requests run
            await asyncio.sleep(0)

        print(f"[Pipeline] Done: {report.tokens_processed} tokens, {report.batches} batches")
        return report

    async def ingest_file(self, path, on_progress: Optional[Callable] = None,
                          cancel_event=None) -> IngestionReport:
        """
        Extract, tokenize and ingest a document.

        Any failure aborts the remaining batches and raises IngestionError;
        batches already applied stay applied.
        """
        report = IngestionReport(total_tokens=0)
        try:
            tokens = await asyncio.to_thread(read_tokens, path)
            report.total_tokens = len(tokens)
            await self._run(tokens, report, on_progress, cancel_event)
        except Exception as exc:
            print(f"[Pipeline] Failed on {path}: {exc}")
            raise IngestionError(tokens_processed=report.tokens_processed) from exc
        return report
