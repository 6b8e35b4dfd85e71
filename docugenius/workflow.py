"""End-to-end run: enumerate sources, generate, render, persist."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from .config import DocuGeniusConfig
from .errors import NoFilesError
from .llm.runner import CompletionService, LLMRunner
from .logging import get_logger
from .models import ProjectDocumentation, RepositoryInfo
from .orchestrator import DocumentationPipeline
from .postproc.renderer import MarkdownRenderer
from .progress import ProgressCallback
from .sources.base import SourceEnumerator
from .stores.analysis_cache import AnalysisCache, JsonAnalysisCache, NullAnalysisCache
from .stores.documents import DocumentStore, SavedDocumentation


@dataclass
class WorkflowResult:
    """Outcome of one documentation workflow run."""

    repository: RepositoryInfo
    documentation: ProjectDocumentation
    markdown: str
    files_analyzed: int
    generated_at: str
    saved: Optional[SavedDocumentation] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "repository": {
                "name": self.repository.name,
                "fullName": self.repository.full_name,
            },
            "documentation": {
                "id": self.saved.id if self.saved else None,
                "markdown": self.markdown,
                "structured": self.documentation.to_dict(),
            },
            "filesAnalyzed": self.files_analyzed,
            "generatedAt": self.generated_at,
            "saved": self.saved is not None,
        }


class DocumentationWorkflow:
    """Coordinates a source enumerator, the pipeline, rendering and storage."""

    def __init__(
        self,
        enumerator: SourceEnumerator,
        pipeline: DocumentationPipeline,
        renderer: MarkdownRenderer | None = None,
        store: DocumentStore | None = None,
    ) -> None:
        self.enumerator = enumerator
        self.pipeline = pipeline
        self.renderer = renderer if renderer is not None else MarkdownRenderer()
        self.store = store
        self.logger = get_logger("workflow")

    async def run(
        self,
        repo_ref: str,
        user_id: str | None = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> WorkflowResult:
        loop = asyncio.get_running_loop()
        repository, files = await asyncio.gather(
            loop.run_in_executor(None, self.enumerator.get_repo_metadata, repo_ref),
            loop.run_in_executor(None, self.enumerator.list_files, repo_ref),
        )
        if not files:
            raise NoFilesError()

        documentation = await self.pipeline.generate(
            files, repository, on_progress, cancel_event=cancel_event
        )
        self.pipeline.analyzer.cache.persist()
        markdown = self.renderer.render(documentation, repository, len(files))

        saved = None
        if self.store is not None and user_id:
            saved = self.store.save(
                user_id,
                repository,
                title=f"{repository.name} Documentation",
                markdown=markdown,
                structured=documentation.to_dict(),
                files_analyzed=len(files),
            )
            self.logger.info("Saved documentation %s for %s", saved.id, repository.full_name)

        return WorkflowResult(
            repository=repository,
            documentation=documentation,
            markdown=markdown,
            files_analyzed=len(files),
            generated_at=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            saved=saved,
        )


def build_pipeline(
    config: DocuGeniusConfig, completion: CompletionService | None = None
) -> DocumentationPipeline:
    """Wire a pipeline from configuration, defaulting to the HTTP completion runner."""
    if completion is None:
        completion = LLMRunner(
            config.llm.model,
            base_url=config.llm.base_url,
            api_key=config.llm.api_key,
            request_timeout=config.llm.request_timeout or config.pipeline.request_timeout,
        )
    cache: AnalysisCache
    if config.store.analysis_cache_path is not None:
        cache = JsonAnalysisCache(config.store.analysis_cache_path)
    else:
        cache = NullAnalysisCache()
    return DocumentationPipeline(completion, settings=config.pipeline, cache=cache)


__all__ = ["DocumentationWorkflow", "WorkflowResult", "build_pipeline"]
