"""Source enumerators that feed files into the pipeline."""

from .base import SourceEnumerator
from .filters import is_code_file, language_for_path
from .github import GitHubSourceEnumerator, parse_repo_ref
from .local import LocalSourceEnumerator

__all__ = [
    "GitHubSourceEnumerator",
    "LocalSourceEnumerator",
    "SourceEnumerator",
    "is_code_file",
    "language_for_path",
    "parse_repo_ref",
]
