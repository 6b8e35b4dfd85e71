"""Per-file analysis through one bounded completion call."""

from __future__ import annotations

import asyncio
import hashlib
import re
import time

from ..config import PipelineSettings
from ..failsafe import build_stub_analysis
from ..llm.runner import CompletionService
from ..logging import get_logger
from ..models import FileAnalysis, ProjectContext, SourceFile
from ..prompting.builder import PromptBuilder
from ..stores.analysis_cache import AnalysisCache, NullAnalysisCache
from .schema import decode_analysis

CACHE_KEY_CONTENT_PREFIX = 1000

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


def cache_key_for(file: SourceFile) -> str:
    """Return the content-derived cache key for ``file``.

    Only the path and the first ``CACHE_KEY_CONTENT_PREFIX`` characters of
    content contribute, so the key is stable across runs.
    """
    prefix = file.content[:CACHE_KEY_CONTENT_PREFIX].encode("utf-8")
    digest = hashlib.sha1(prefix).hexdigest()[:16]
    return f"file_{_NON_ALNUM_RE.sub('_', file.path)}_{digest}"


class FileAnalyzer:
    """Produces a FileAnalysis for one file, degrading to a stub on any failure."""

    def __init__(
        self,
        completion: CompletionService,
        *,
        settings: PipelineSettings | None = None,
        cache: AnalysisCache | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.completion = completion
        self.settings = settings if settings is not None else PipelineSettings()
        self.cache = cache if cache is not None else NullAnalysisCache()
        self.prompt_builder = prompt_builder if prompt_builder is not None else PromptBuilder(
            content_char_limit=self.settings.content_char_limit
        )
        self.logger = get_logger("analyzers.file")

    async def analyze(self, file: SourceFile, context: ProjectContext) -> FileAnalysis:
        cache_key = cache_key_for(file)
        cached = self.cache.get(cache_key)
        if cached is not None and cached.file_path == file.path:
            self.logger.debug("Cache hit for %s", file.path)
            return cached
        if cached is not None:
            self.logger.debug("Ignoring cache entry %s recorded for %s", cache_key, cached.file_path)

        started = time.monotonic()
        prompt = self.prompt_builder.file_analysis(file, context)
        attempts = 1 + self.settings.max_retries
        for attempt in range(1, attempts + 1):
            try:
                text = await asyncio.wait_for(
                    self.completion.complete(
                        prompt,
                        model=self.settings.model,
                        max_tokens=self.settings.analysis_max_tokens,
                        temperature=self.settings.analysis_temperature,
                        json_mode=True,
                        system=PromptBuilder.SYSTEM_PROMPT,
                    ),
                    timeout=self.settings.request_timeout,
                )
                analysis = decode_analysis(
                    text,
                    file_path=file.path,
                    cache_key=cache_key,
                    analysis_time=_elapsed_ms(started),
                )
            except Exception as exc:
                reason = "timed out" if isinstance(exc, asyncio.TimeoutError) else str(exc) or type(exc).__name__
                self.logger.warning(
                    "Analysis of %s failed (attempt %d/%d): %s", file.path, attempt, attempts, reason
                )
                continue
            self.cache.put(cache_key, analysis)
            return analysis

        return build_stub_analysis(file, cache_key=cache_key, analysis_time=_elapsed_ms(started))


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 2)


__all__ = ["CACHE_KEY_CONTENT_PREFIX", "FileAnalyzer", "cache_key_for"]
