"""Enumerates code files from a local working tree."""

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from ..errors import SourceError
from ..logging import get_logger
from ..models import RepositoryInfo, SourceFile
from .base import SourceEnumerator
from .filters import MAX_FETCHED_FILES, MAX_FILE_BYTES, accept, language_for_path

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".docugenius",
}

logger = get_logger("sources.local")


@dataclass(frozen=True)
class IgnoreRule:
    """A single pattern from .gitignore or the configured excludes."""

    pattern: str
    directory_only: bool = False
    anchored: bool = False
    negate: bool = False

    @classmethod
    def parse(cls, line: str) -> "IgnoreRule | None":
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        negate = line.startswith("!")
        pattern = line[1:] if negate else line
        directory_only = pattern.endswith("/")
        pattern = pattern.rstrip("/")
        anchored = pattern.startswith("/") or "/" in pattern
        pattern = pattern.lstrip("/")
        if not pattern:
            return None
        return cls(pattern, directory_only=directory_only, anchored=anchored, negate=negate)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


class IgnoreRules:
    """Ordered ignore rules; the last matching rule decides."""

    def __init__(self, rules: Iterable[IgnoreRule] = ()) -> None:
        self.rules: List[IgnoreRule] = list(rules)

    @classmethod
    def for_root(cls, root: Path, extra_patterns: Sequence[str] = ()) -> "IgnoreRules":
        lines: List[str] = []
        gitignore = root / ".gitignore"
        if gitignore.is_file():
            lines.extend(gitignore.read_text(encoding="utf-8", errors="ignore").splitlines())
        lines.extend(extra_patterns)
        return cls(rule for rule in map(IgnoreRule.parse, lines) if rule is not None)

    def ignores(self, rel_path: str, is_dir: bool) -> bool:
        ignored = False
        for rule in self.rules:
            if rule.matches(rel_path, is_dir):
                ignored = not rule.negate
        return ignored


class LocalSourceEnumerator(SourceEnumerator):
    """Walks a directory, honouring .gitignore and the shared code-file filters."""

    def __init__(
        self,
        *,
        max_file_bytes: int = MAX_FILE_BYTES,
        max_files: int = MAX_FETCHED_FILES,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.max_file_bytes = max_file_bytes
        self.max_files = max_files
        self.exclude_paths = list(exclude_paths)

    def list_files(self, repo_ref: str) -> List[SourceFile]:
        root = self._resolve_root(repo_ref)
        rules = IgnoreRules.for_root(root, self.exclude_paths)

        files: List[SourceFile] = []
        for path in self._iter_files(root, rules):
            rel_path = path.relative_to(root).as_posix()
            size = path.stat().st_size
            if not accept(rel_path, size, max_file_bytes=self.max_file_bytes):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable file %s: %s", rel_path, exc)
                continue
            files.append(
                SourceFile(
                    path=rel_path,
                    name=path.name,
                    content=content,
                    language=language_for_path(rel_path),
                    size=size,
                )
            )
            if len(files) >= self.max_files:
                logger.info("Reached file limit of %d under %s", self.max_files, root)
                break
        return files

    def get_repo_metadata(self, repo_ref: str) -> RepositoryInfo:
        root = self._resolve_root(repo_ref)
        languages = Counter(
            language_for_path(path.relative_to(root).as_posix())
            for path in self._iter_files(root, IgnoreRules.for_root(root, self.exclude_paths))
        )
        languages.pop("text", None)
        language = languages.most_common(1)[0][0] if languages else None
        return RepositoryInfo(name=root.name, full_name=f"local/{root.name}", language=language)

    @staticmethod
    def _resolve_root(repo_ref: str) -> Path:
        root = Path(repo_ref).expanduser().resolve()
        if not root.exists():
            raise SourceError(f"Repository path not found: {repo_ref}")
        if not root.is_dir():
            raise SourceError(f"Repository path is not a directory: {repo_ref}")
        return root

    @staticmethod
    def _iter_files(root: Path, rules: IgnoreRules) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in sorted(dirnames):
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if name in _EXCLUDED_DIRS or rules.ignores(rel_path, True):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if rules.ignores(rel_path, False):
                    continue
                yield current_dir / filename


__all__ = ["IgnoreRule", "IgnoreRules", "LocalSourceEnumerator"]
