"""Pluggable cache for per-file analyses keyed by content fingerprint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..analyzers.schema import decode_analysis
from ..logging import get_logger
from ..models import FileAnalysis, class_to_dict, function_to_dict

_CACHE_VERSION = 1

logger = get_logger("stores.analysis_cache")


class AnalysisCache(ABC):
    """Contract for analysis caches consulted before each completion call."""

    @abstractmethod
    def get(self, key: str) -> Optional[FileAnalysis]:
        """Return the cached analysis for ``key`` or None on a miss."""

    @abstractmethod
    def put(self, key: str, analysis: FileAnalysis) -> None:
        """Remember ``analysis`` under ``key``."""

    def persist(self) -> None:
        """Flush pending entries; in-memory caches have nothing to write."""


class NullAnalysisCache(AnalysisCache):
    """Cache that never hits; the default for pipeline runs."""

    def get(self, key: str) -> Optional[FileAnalysis]:
        return None

    def put(self, key: str, analysis: FileAnalysis) -> None:
        return None


class JsonAnalysisCache(AnalysisCache):
    """Stores analyses in a versioned JSON file between runs."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def get(self, key: str) -> Optional[FileAnalysis]:
        entry = self._entries.get(key)
        if not entry:
            return None
        analysis = entry.get("analysis")
        file_path = entry.get("file_path")
        if not isinstance(analysis, dict) or not isinstance(file_path, str):
            return None
        try:
            return decode_analysis(
                json.dumps(analysis), file_path=file_path, cache_key=key, analysis_time=0.0
            )
        except ValidationError:
            logger.debug("Discarding invalid cache entry %s", key)
            return None

    def put(self, key: str, analysis: FileAnalysis) -> None:
        if analysis.degraded:
            return
        self._entries[key] = {
            "file_path": analysis.file_path,
            "analysis": _analysis_to_payload(analysis),
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {"version": _CACHE_VERSION, "entries": self._entries}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        self._dirty = False

    def clear(self) -> None:
        self._entries.clear()
        self._dirty = True

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable analysis cache %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        self._entries = {
            key: raw
            for key, raw in entries.items()
            if isinstance(key, str) and isinstance(raw, dict) and "analysis" in raw
        }
        self._dirty = False


def _analysis_to_payload(analysis: FileAnalysis) -> Dict[str, object]:
    return {
        "filePath": analysis.file_path,
        "summary": analysis.summary,
        "importance": analysis.importance,
        "complexity": analysis.complexity,
        "functions": [function_to_dict(function) for function in analysis.functions],
        "classes": [class_to_dict(cls) for cls in analysis.classes],
        "dependencies": list(analysis.dependencies),
    }


__all__ = ["AnalysisCache", "JsonAnalysisCache", "NullAnalysisCache"]
