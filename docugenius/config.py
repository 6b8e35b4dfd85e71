"""Configuration loading for docugenius (.docugenius.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".docugenius.yml"


@dataclass
class LLMConfig:
    """Completion service settings."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigError("llm.request_timeout must be positive")


@dataclass
class PipelineSettings:
    """Resource bounds and call parameters for one pipeline run."""

    max_files: int = 30
    batch_size: int = 3
    content_char_limit: int = 8000
    model: Optional[str] = None
    analysis_max_tokens: int = 2000
    analysis_temperature: float = 0.1
    overview_max_tokens: int = 800
    overview_temperature: float = 0.3
    architecture_max_tokens: int = 1000
    architecture_temperature: float = 0.2
    request_timeout: float = 60.0
    max_retries: int = 0

    def __post_init__(self) -> None:
        if self.max_files < 1:
            raise ConfigError("pipeline.max_files must be at least 1")
        if self.batch_size < 1:
            raise ConfigError("pipeline.batch_size must be at least 1")
        if self.content_char_limit < 1:
            raise ConfigError("pipeline.content_char_limit must be at least 1")
        if self.request_timeout <= 0:
            raise ConfigError("pipeline.request_timeout must be positive")
        if self.max_retries < 0:
            raise ConfigError("pipeline.max_retries cannot be negative")


@dataclass
class SourceConfig:
    """Limits applied while enumerating repository files."""

    max_file_bytes: int = 100_000
    max_files: int = 50
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class StoreConfig:
    """Locations of the documentation store and analysis cache."""

    documents_path: Optional[Path] = None
    analysis_cache_path: Optional[Path] = None


@dataclass
class DocuGeniusConfig:
    """Represents the settings defined in .docugenius.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    sources: SourceConfig = field(default_factory=SourceConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def load_config(config_path: Path) -> DocuGeniusConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocuGeniusConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    pipeline = _load_pipeline(_as_dict(data.get("pipeline")))

    sources_data = _as_dict(data.get("sources"))
    sources = SourceConfig()
    if sources_data:
        max_file_bytes = _as_int(sources_data.get("max_file_bytes"))
        max_files = _as_int(sources_data.get("max_files"))
        if max_file_bytes is not None:
            sources.max_file_bytes = max_file_bytes
        if max_files is not None:
            sources.max_files = max_files
        sources.exclude_paths = _as_str_list(sources_data.get("exclude_paths"))

    store_data = _as_dict(data.get("store"))
    documents = _as_str(store_data.get("documents"))
    analysis_cache = _as_str(store_data.get("analysis_cache"))
    store = StoreConfig(
        documents_path=root / documents if documents else None,
        analysis_cache_path=root / analysis_cache if analysis_cache else None,
    )

    return DocuGeniusConfig(root=root, llm=llm, pipeline=pipeline, sources=sources, store=store)


def _load_pipeline(data: Dict[str, Any]) -> PipelineSettings:
    defaults = PipelineSettings()
    overrides: Dict[str, Any] = {}
    for key, default in vars(defaults).items():
        if key not in data:
            continue
        raw = data[key]
        if isinstance(default, int):
            value = _as_int(raw)
        elif isinstance(default, float):
            value = _as_float(raw)
        else:
            value = _as_str(raw)
        if value is None:
            raise ConfigError(f"Invalid value for pipeline.{key}: {raw!r}")
        overrides[key] = value
    return PipelineSettings(**overrides)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "DocuGeniusConfig",
    "LLMConfig",
    "PipelineSettings",
    "SourceConfig",
    "StoreConfig",
    "load_config",
]
