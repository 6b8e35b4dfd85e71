"""Pipeline orchestration: classify, analyze in batches, compile."""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from .analyzers.categories import categorize, prioritize
from .analyzers.context import build_project_context
from .analyzers.file_analyzer import FileAnalyzer
from .compiler import DocumentationCompiler
from .config import PipelineSettings
from .errors import NoAnalysesError, NoFilesError, PipelineCancelled
from .llm.runner import CompletionService
from .logging import get_run_logger
from .models import ProjectDocumentation, RepositoryInfo, SourceFile
from .progress import ProgressCallback, ProgressReporter
from .scheduler import BatchScheduler
from .stores.analysis_cache import AnalysisCache

ANALYSIS_PROGRESS_START = 10.0
ANALYSIS_PROGRESS_END = 70.0
COMPILE_PROGRESS_SHARE = 0.3


class DocumentationPipeline:
    """Coordinates one documentation run over an in-memory file list."""

    def __init__(
        self,
        completion: CompletionService,
        *,
        settings: PipelineSettings | None = None,
        cache: AnalysisCache | None = None,
        analyzer: FileAnalyzer | None = None,
        scheduler: BatchScheduler | None = None,
        compiler: DocumentationCompiler | None = None,
    ) -> None:
        self.settings = settings if settings is not None else PipelineSettings()
        if analyzer is None:
            analyzer = FileAnalyzer(completion, settings=self.settings, cache=cache)
        self.analyzer = analyzer
        if scheduler is None:
            scheduler = BatchScheduler(
                analyzer,
                max_files=self.settings.max_files,
                batch_size=self.settings.batch_size,
            )
        self.scheduler = scheduler
        if compiler is None:
            compiler = DocumentationCompiler(completion, settings=self.settings)
        self.compiler = compiler

    async def generate(
        self,
        files: Sequence[SourceFile],
        repository: RepositoryInfo,
        on_progress: Optional[ProgressCallback] = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ProjectDocumentation:
        reporter = ProgressReporter(on_progress)
        try:
            return await self._generate(files, repository, reporter, cancel_event)
        except Exception as exc:
            get_run_logger("orchestrator", repository.full_name).error("Documentation run failed: %s", exc)
            reporter.emit("error", str(exc) or type(exc).__name__, reporter.last_progress)
            raise

    async def _generate(
        self,
        files: Sequence[SourceFile],
        repository: RepositoryInfo,
        reporter: ProgressReporter,
        cancel_event: asyncio.Event | None,
    ) -> ProjectDocumentation:
        reporter.emit("started", "Starting documentation generation", 0, stage="setup")
        if not files:
            raise NoFilesError()

        log = get_run_logger("orchestrator", repository.full_name)
        log.info("Generating documentation for %d files", len(files))
        context = build_project_context(files, repository)
        reporter.emit(
            "started",
            f"Detected {context.framework} project",
            5,
            stage="setup",
            data={"framework": context.framework, "language": context.language},
        )

        categories = categorize(files)
        ordered = prioritize(files)
        reporter.emit(
            "categorized",
            f"Categorized {len(files)} files",
            ANALYSIS_PROGRESS_START,
            stage="categorization",
            data={name.value: len(members) for name, members in categories.items()},
        )
        _check_cancel(cancel_event, "analysis")

        analyses = await self.scheduler.run(
            ordered,
            context,
            reporter.forward,
            progress_start=ANALYSIS_PROGRESS_START,
            progress_end=ANALYSIS_PROGRESS_END,
            cancel_event=cancel_event,
        )
        if not analyses:
            raise NoAnalysesError()
        degraded = sum(1 for analysis in analyses if analysis.degraded)
        if degraded:
            log.warning("%d of %d analyses fell back to stubs", degraded, len(analyses))

        _check_cancel(cancel_event, "compilation")
        reporter.emit(
            "compiling",
            "Compiling documentation",
            ANALYSIS_PROGRESS_END,
            stage="compilation",
            data={"analyses": len(analyses)},
        )

        def _on_stage(percent: float) -> None:
            reporter.emit(
                "compiling",
                f"Compiling documentation ({percent:.0f}%)",
                ANALYSIS_PROGRESS_END + percent * COMPILE_PROGRESS_SHARE,
                stage="compilation",
            )

        documentation = await self.compiler.compile(analyses, context, _on_stage)
        reporter.emit(
            "completed",
            "Documentation generated",
            100,
            stage="done",
            data={"filesAnalyzed": len(analyses)},
        )
        return documentation


def _check_cancel(cancel_event: asyncio.Event | None, stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelled(f"Run cancelled before {stage}")


__all__ = [
    "ANALYSIS_PROGRESS_END",
    "ANALYSIS_PROGRESS_START",
    "COMPILE_PROGRESS_SHARE",
    "DocumentationPipeline",
]
