from __future__ import annotations

from pathlib import Path

import pytest

from docugenius.models import RepositoryInfo
from tests._fixtures.fakes import EventRecorder, FakeCompletionService
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def completion() -> FakeCompletionService:
    return FakeCompletionService()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def repository() -> RepositoryInfo:
    return RepositoryInfo(
        name="acme-app",
        full_name="acme/acme-app",
        description="Storefront for Acme",
        language="TypeScript",
    )
