"""Tests for docugenius.orchestrator."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from docugenius.analyzers.file_analyzer import FileAnalyzer, cache_key_for
from docugenius.config import PipelineSettings
from docugenius.errors import NoAnalysesError, NoFilesError, PipelineCancelled
from docugenius.orchestrator import DocumentationPipeline
from docugenius.stores.analysis_cache import JsonAnalysisCache
from tests._fixtures.fakes import (
    EventRecorder,
    FakeCompletionService,
    analysis_json,
    make_file,
    prompt_file_path,
)


class EmptyScheduler:
    """Scheduler double that loses every analysis."""

    async def run(self, files, context, on_progress=None, **kwargs):
        return []


def _generate(pipeline, files, repository, recorder=None, **kwargs):
    return asyncio.run(pipeline.generate(files, repository, recorder, **kwargs))


def _assert_monotonic(values: list[float]) -> None:
    assert all(later >= earlier for earlier, later in zip(values, values[1:])), values


def test_empty_input_fails_before_any_completion_call(completion, recorder, repository) -> None:
    pipeline = DocumentationPipeline(completion)

    with pytest.raises(NoFilesError):
        _generate(pipeline, [], repository, recorder)

    assert completion.calls == []
    assert recorder.kinds() == ["started", "error"]
    assert recorder.events[-1].progress == 0


def test_single_core_file_produces_one_file_documentation(recorder, repository) -> None:
    completion = FakeCompletionService(
        lambda prompt, json_mode: analysis_json(prompt_file_path(prompt), importance="critical")
        if json_mode
        else "prose"
    )
    pipeline = DocumentationPipeline(completion)

    doc = _generate(pipeline, [make_file("src/index.ts")], repository, recorder)

    assert list(doc.file_documentations) == ["src/index.ts"]
    assert doc.file_documentations["src/index.ts"].importance == "Critical"
    assert doc.overview == "prose"
    assert recorder.kinds()[-1] == "completed"


def test_failed_file_in_batch_becomes_stub(recorder, repository) -> None:
    def _responder(prompt: str, json_mode: bool) -> str:
        if not json_mode:
            return "prose"
        path = prompt_file_path(prompt)
        if path == "src/lib/broken.ts":
            raise RuntimeError("provider exploded")
        return analysis_json(path)

    pipeline = DocumentationPipeline(FakeCompletionService(_responder))
    files = [make_file("src/index.ts"), make_file("src/lib/broken.ts"), make_file("src/lib/fine.ts")]

    doc = _generate(pipeline, files, repository, recorder)

    assert len(doc.file_documentations) == 3
    stub = doc.file_documentations["src/lib/broken.ts"]
    assert stub.importance == "Low"
    assert stub.code_quality.complexity == 5
    assert stub.functions == []
    assert stub.classes == []
    assert "analysis failed" in stub.summary


def test_forty_five_files_emit_strictly_increasing_analysis_progress(recorder, repository) -> None:
    completion = FakeCompletionService()
    pipeline = DocumentationPipeline(completion, settings=PipelineSettings(max_files=30, batch_size=3))
    files = [make_file(f"src/lib/module_{i:02d}.ts") for i in range(45)]

    doc = _generate(pipeline, files, repository, recorder)

    assert len(doc.file_documentations) == 30
    assert len(completion.analysis_calls) == 30
    analyzing = [e.progress for e in recorder.events if e.kind == "analyzing"]
    assert len(analyzing) == 10
    assert all(later > earlier for earlier, later in zip(analyzing, analyzing[1:]))
    assert analyzing[0] > 10 and analyzing[-1] == pytest.approx(70)
    _assert_monotonic(recorder.progress)


def test_progress_checkpoints(recorder, repository) -> None:
    pipeline = DocumentationPipeline(FakeCompletionService())

    _generate(pipeline, [make_file("src/index.ts"), make_file("src/lib/a.ts")], repository, recorder)

    checkpoints = [(e.kind, e.progress) for e in recorder.events if e.kind != "analyzing"]
    assert checkpoints == [
        ("started", 0),
        ("started", 5),
        ("categorized", 10),
        ("compiling", 70),
        ("compiling", 77.5),
        ("compiling", 97),
        ("compiling", 100),
        ("completed", 100),
    ]
    categorized = next(e for e in recorder.events if e.kind == "categorized")
    assert categorized.data == {"core": 1, "utils": 1}
    _assert_monotonic(recorder.progress)


def test_identical_files_share_cache_keys_across_runs(tmp_path: Path, repository) -> None:
    cache_path = tmp_path / "analysis-cache.json"
    files = [make_file("src/index.ts", "export default function Home() {}\n")]

    first = FakeCompletionService()
    cache = JsonAnalysisCache(cache_path)
    _generate(DocumentationPipeline(first, cache=cache), files, repository)
    cache.persist()

    second = FakeCompletionService()
    _generate(DocumentationPipeline(second, cache=JsonAnalysisCache(cache_path)), files, repository)

    twin = make_file("src/index.ts", "export default function Home() {}\n")
    assert cache_key_for(files[0]) == cache_key_for(twin)
    assert len(first.analysis_calls) == 1
    assert second.analysis_calls == []


def test_zero_surviving_analyses_is_fatal(completion, recorder, repository) -> None:
    pipeline = DocumentationPipeline(completion, scheduler=EmptyScheduler())  # type: ignore[arg-type]

    with pytest.raises(NoAnalysesError):
        _generate(pipeline, [make_file("src/index.ts")], repository, recorder)

    assert recorder.events[-1].kind == "error"
    assert recorder.events[-1].progress == 10
    assert completion.calls == []


def test_sink_failures_do_not_abort_the_run(repository) -> None:
    seen = []

    def _sink(event) -> None:
        seen.append(event.kind)
        raise RuntimeError("UI went away")

    pipeline = DocumentationPipeline(FakeCompletionService())

    doc = _generate(pipeline, [make_file("src/index.ts")], repository, _sink)

    assert "src/index.ts" in doc.file_documentations
    assert seen[-1] == "completed"


def test_cancelled_run_reports_error(completion, recorder, repository) -> None:
    async def _run() -> None:
        cancel = asyncio.Event()
        cancel.set()
        await DocumentationPipeline(completion).generate(
            [make_file("src/index.ts")], repository, recorder, cancel_event=cancel
        )

    with pytest.raises(PipelineCancelled):
        asyncio.run(_run())

    assert completion.calls == []
    assert recorder.kinds()[-1] == "error"


def test_injected_analyzer_is_used(completion, repository) -> None:
    analyzer = FileAnalyzer(completion, settings=PipelineSettings(content_char_limit=10))
    pipeline = DocumentationPipeline(completion, analyzer=analyzer)

    _generate(pipeline, [make_file("src/index.ts", "x" * 50)], repository)

    assert "x" * 11 not in completion.analysis_calls[0]["prompt"]


def test_malformed_pyproject_does_not_abort_generation(recorder, repository) -> None:
    files = [make_file("pyproject.toml", "[project]\ndependencies = 5\n", "toml"), make_file("src/index.ts")]

    doc = _generate(DocumentationPipeline(FakeCompletionService()), files, repository, recorder)

    assert "src/index.ts" in doc.file_documentations
    assert recorder.kinds()[-1] == "completed"
