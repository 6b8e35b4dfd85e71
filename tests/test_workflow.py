"""Tests for the end-to-end documentation workflow."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from docugenius.config import DocuGeniusConfig, StoreConfig
from docugenius.errors import NoFilesError
from docugenius.orchestrator import DocumentationPipeline
from docugenius.sources.local import LocalSourceEnumerator
from docugenius.stores.analysis_cache import JsonAnalysisCache, NullAnalysisCache
from docugenius.stores.documents import DocumentStore
from docugenius.workflow import DocumentationWorkflow, build_pipeline
from tests._fixtures.fakes import EventRecorder, FakeCompletionService


def test_run_renders_and_saves(repo_builder, completion) -> None:
    repo_builder.write({"src/index.ts": "export default 1\n", "src/api/users.ts": "export function GET() {}\n"})
    store = DocumentStore()
    workflow = DocumentationWorkflow(LocalSourceEnumerator(), DocumentationPipeline(completion), store=store)
    recorder = EventRecorder()

    result = asyncio.run(workflow.run(str(repo_builder.path()), "alice", recorder))

    assert result.files_analyzed == 2
    assert result.markdown.startswith("# repo Documentation")
    assert result.saved is not None
    assert store.list("alice")[0].id == result.saved.id
    assert result.to_dict()["documentation"]["structured"]["architecture"] == "Synthesized prose."
    assert recorder.kinds()[-1] == "completed"


def test_run_without_user_does_not_save(repo_builder, completion) -> None:
    repo_builder.write({"src/index.ts": "export default 1\n"})
    store = DocumentStore()
    workflow = DocumentationWorkflow(LocalSourceEnumerator(), DocumentationPipeline(completion), store=store)

    result = asyncio.run(workflow.run(str(repo_builder.path())))

    assert result.saved is None
    assert len(store) == 0
    assert result.to_dict()["saved"] is False


def test_run_without_files_raises(repo_builder, completion) -> None:
    repo_builder.write({"README.md": "# empty\n"})
    workflow = DocumentationWorkflow(LocalSourceEnumerator(), DocumentationPipeline(completion))

    with pytest.raises(NoFilesError):
        asyncio.run(workflow.run(str(repo_builder.path())))
    assert completion.calls == []


def test_run_persists_analysis_cache(repo_builder, tmp_path: Path) -> None:
    repo_builder.write({"src/index.ts": "export default 1\n"})
    cache_path = tmp_path / "cache.json"
    workflow = DocumentationWorkflow(
        LocalSourceEnumerator(),
        DocumentationPipeline(FakeCompletionService(), cache=JsonAnalysisCache(cache_path)),
    )

    asyncio.run(workflow.run(str(repo_builder.path())))

    assert cache_path.exists()


def test_build_pipeline_wires_cache_from_config(tmp_path: Path) -> None:
    completion = FakeCompletionService()

    plain = build_pipeline(DocuGeniusConfig(root=tmp_path), completion)
    cached = build_pipeline(
        DocuGeniusConfig(root=tmp_path, store=StoreConfig(analysis_cache_path=tmp_path / "c.json")),
        completion,
    )

    assert isinstance(plain.analyzer.cache, NullAnalysisCache)
    assert isinstance(cached.analyzer.cache, JsonAnalysisCache)
    assert plain.scheduler.max_files == 30
