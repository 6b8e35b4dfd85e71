"""JSON-file persistence for generated documentation, scoped per user."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
import json
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional
import uuid

from ..logging import get_logger
from ..models import RepositoryInfo

_STORE_VERSION = 1

logger = get_logger("stores.documents")


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class SavedDocumentation:
    """A stored documentation record owned by one user."""

    id: str
    user_id: str
    repository: Dict[str, Any]
    title: str
    markdown: str
    structured: Dict[str, Any]
    files_analyzed: int
    generated_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def summary(self) -> Dict[str, Any]:
        """Listing projection without the heavy markdown and structured bodies."""
        return {
            "id": self.id,
            "title": self.title,
            "repository": self.repository,
            "filesAnalyzed": self.files_analyzed,
            "generatedAt": self.generated_at,
            "updatedAt": self.updated_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        payload = self.summary()
        payload["markdown"] = self.markdown
        payload["structured"] = self.structured
        return payload


class DocumentStore:
    """Keeps one documentation record per (user, repository) pair.

    Records live in memory and are written through to ``path`` when one is
    given. Saving for a repository the user already documented replaces the
    content in place and keeps the record id.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._records: Dict[str, SavedDocumentation] = {}
        self._lock = Lock()
        if self._path is not None:
            self._load(self._path)

    def save(
        self,
        user_id: str,
        repository: RepositoryInfo,
        *,
        title: str,
        markdown: str,
        structured: Dict[str, Any],
        files_analyzed: int,
    ) -> SavedDocumentation:
        repo_payload = {
            "name": repository.name,
            "fullName": repository.full_name,
            "description": repository.description,
            "language": repository.language,
        }
        with self._lock:
            existing = self._find(user_id, repository.full_name)
            if existing is not None:
                existing.title = title
                existing.markdown = markdown
                existing.structured = structured
                existing.files_analyzed = files_analyzed
                existing.repository = repo_payload
                existing.updated_at = _now()
                record = existing
                logger.debug("Updated documentation %s for %s", record.id, repository.full_name)
            else:
                record = SavedDocumentation(
                    id=uuid.uuid4().hex,
                    user_id=user_id,
                    repository=repo_payload,
                    title=title,
                    markdown=markdown,
                    structured=structured,
                    files_analyzed=files_analyzed,
                )
                self._records[record.id] = record
                logger.debug("Stored documentation %s for %s", record.id, repository.full_name)
            self._persist()
        return record

    def list(self, user_id: str) -> List[SavedDocumentation]:
        records = [record for record in self._records.values() if record.user_id == user_id]
        return sorted(records, key=lambda record: record.updated_at, reverse=True)

    def get(self, doc_id: str, user_id: str) -> Optional[SavedDocumentation]:
        record = self._records.get(doc_id)
        if record is None or record.user_id != user_id:
            return None
        return record

    def delete(self, doc_id: str, user_id: str) -> bool:
        with self._lock:
            record = self._records.get(doc_id)
            if record is None or record.user_id != user_id:
                return False
            del self._records[doc_id]
            self._persist()
        return True

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Internal helpers

    def _find(self, user_id: str, full_name: str) -> Optional[SavedDocumentation]:
        for record in self._records.values():
            if record.user_id == user_id and record.repository.get("fullName") == full_name:
                return record
        return None

    def _persist(self) -> None:
        if self._path is None:
            return
        payload = {
            "version": _STORE_VERSION,
            "documents": [asdict(record) for record in self._records.values()],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable document store %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return
        for raw in data.get("documents") or []:
            if not isinstance(raw, dict):
                continue
            try:
                record = SavedDocumentation(**raw)
            except TypeError:
                logger.debug("Skipping malformed document record")
                continue
            self._records[record.id] = record


__all__ = ["DocumentStore", "SavedDocumentation"]
