"""Bounded-concurrency batch scheduling of per-file analyses."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Generic, List, Optional, Sequence, Tuple, TypeVar

from .analyzers.file_analyzer import FileAnalyzer
from .errors import PipelineCancelled
from .logging import get_logger
from .models import FileAnalysis, ProgressEvent, ProjectContext, SourceFile
from .progress import ProgressCallback

T = TypeVar("T")


@dataclass
class Settled(Generic[T]):
    """Outcome of a settle-all join, in submission order."""

    fulfilled: List[Tuple[int, T]] = field(default_factory=list)
    rejected: List[Tuple[int, BaseException]] = field(default_factory=list)


async def settle_all(awaitables: Sequence[Awaitable[T]]) -> Settled[T]:
    """Await every awaitable and partition outcomes into successes and failures.

    Unlike a fail-fast join, a failing awaitable never cancels its siblings.
    """
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
    settled: Settled[T] = Settled()
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, BaseException):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            settled.rejected.append((index, outcome))
        else:
            settled.fulfilled.append((index, outcome))
    return settled


class BatchScheduler:
    """Drives the FileAnalyzer over a capped file list in fixed-size batches."""

    def __init__(self, analyzer: FileAnalyzer, *, max_files: int = 30, batch_size: int = 3) -> None:
        if max_files < 1:
            raise ValueError("max_files must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.analyzer = analyzer
        self.max_files = max_files
        self.batch_size = batch_size
        self.logger = get_logger("scheduler")

    def plan(self, files: Sequence[SourceFile]) -> List[List[SourceFile]]:
        """Cap ``files`` (already prioritized) and split them into batches."""
        capped = list(files[: self.max_files])
        return [capped[i : i + self.batch_size] for i in range(0, len(capped), self.batch_size)]

    async def run(
        self,
        files: Sequence[SourceFile],
        context: ProjectContext,
        on_progress: Optional[ProgressCallback] = None,
        *,
        progress_start: float = 10.0,
        progress_end: float = 70.0,
        cancel_event: asyncio.Event | None = None,
    ) -> List[FileAnalysis]:
        batches = self.plan(files)
        planned = sum(len(batch) for batch in batches)
        analyses: List[FileAnalysis] = []
        processed = 0

        if len(files) > planned:
            self.logger.info("Analyzing top %d of %d files", planned, len(files))

        for number, batch in enumerate(batches, start=1):
            if cancel_event is not None and cancel_event.is_set():
                raise PipelineCancelled(f"Run cancelled before batch {number}/{len(batches)}")

            settled = await settle_all([self.analyzer.analyze(file, context) for file in batch])
            for index, exc in settled.rejected:
                self.logger.error("Failed to analyze %s: %s", batch[index].path, exc)
            analyses.extend(analysis for _, analysis in settled.fulfilled)

            processed += len(batch)
            if on_progress is not None:
                span = progress_end - progress_start
                on_progress(
                    ProgressEvent(
                        kind="analyzing",
                        message=f"Analyzed {len(analyses)}/{planned} files",
                        progress=progress_start + (processed / planned) * span,
                        stage="analysis",
                        data={"batch": number, "batches": len(batches)},
                    )
                )

        return analyses


__all__ = ["BatchScheduler", "Settled", "settle_all"]
