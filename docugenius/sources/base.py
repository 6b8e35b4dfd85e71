"""Source enumerator contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import RepositoryInfo, SourceFile


class SourceEnumerator(ABC):
    """Lists repository files and metadata for a pipeline run."""

    @abstractmethod
    def list_files(self, repo_ref: str) -> List[SourceFile]:
        """Return the code files of ``repo_ref`` with their content loaded."""

    @abstractmethod
    def get_repo_metadata(self, repo_ref: str) -> RepositoryInfo:
        """Return descriptive metadata for ``repo_ref``."""


__all__ = ["SourceEnumerator"]
