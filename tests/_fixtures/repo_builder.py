"""Helper utilities for constructing temporary repositories in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import List, Mapping

from docugenius.models import SourceFile
from docugenius.sources.local import LocalSourceEnumerator


class RepoBuilder:
    """Utility for writing files into a throwaway repository and enumerating it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()
        self._enumerator = LocalSourceEnumerator()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the repository."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def files(self) -> List[SourceFile]:
        """Return the repository files as the local enumerator sees them."""
        return self._enumerator.list_files(str(self.root))

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


__all__ = ["RepoBuilder"]
