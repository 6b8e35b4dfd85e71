"""Tests for docugenius.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docugenius.config import CONFIG_FILENAME, PipelineSettings, load_config
from docugenius.errors import ConfigError


def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.root == tmp_path.resolve()
    assert config.pipeline == PipelineSettings()
    assert config.pipeline.max_files == 30
    assert config.pipeline.batch_size == 3
    assert config.pipeline.max_retries == 0
    assert config.sources.max_file_bytes == 100_000
    assert config.store.documents_path is None


def test_config_sections_are_parsed(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        """
llm:
  model: gpt-4o
  base_url: http://localhost:8080/v1
  request_timeout: 30
pipeline:
  max_files: 12
  batch_size: "4"
  analysis_temperature: 0
  max_retries: 2
sources:
  max_files: 20
  exclude_paths:
    - fixtures/
store:
  documents: .docugenius/documents.json
  analysis_cache: .docugenius/cache.json
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.llm.model == "gpt-4o"
    assert config.llm.base_url == "http://localhost:8080/v1"
    assert config.llm.request_timeout == 30.0
    assert config.pipeline.max_files == 12
    assert config.pipeline.batch_size == 4
    assert config.pipeline.analysis_temperature == 0.0
    assert config.pipeline.max_retries == 2
    assert config.sources.max_files == 20
    assert config.sources.exclude_paths == ["fixtures/"]
    assert config.store.documents_path == tmp_path.resolve() / ".docugenius/documents.json"
    assert config.store.analysis_cache_path == tmp_path.resolve() / ".docugenius/cache.json"


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("pipeline: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "body",
    [
        "pipeline:\n  batch_size: 0\n",
        "pipeline:\n  max_files: many\n",
        "pipeline:\n  request_timeout: 0\n",
        "pipeline:\n  request_timeout: -5\n",
        "llm:\n  request_timeout: 0\n",
    ],
)
def test_invalid_pipeline_values_raise(tmp_path: Path, body: str) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(body, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_explicit_file_path_is_accepted(tmp_path: Path) -> None:
    custom = tmp_path / "custom.yml"
    custom.write_text("pipeline:\n  batch_size: 5\n", encoding="utf-8")

    assert load_config(custom).pipeline.batch_size == 5
