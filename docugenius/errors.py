"""Exception hierarchy shared across docugenius components."""

from __future__ import annotations


class DocuGeniusError(RuntimeError):
    """Base class for errors raised by docugenius."""


class ConfigError(DocuGeniusError):
    """Raised when the configuration file cannot be parsed."""


class CompletionError(DocuGeniusError):
    """Raised when the completion service fails to return usable text."""


class SourceError(DocuGeniusError):
    """Raised when repository files or metadata cannot be enumerated."""


class PipelineError(DocuGeniusError):
    """Fatal pipeline failure; no partial document can be produced."""


class NoFilesError(PipelineError):
    """Raised when there are no files to document."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "No suitable files found for documentation generation")


class NoAnalysesError(PipelineError):
    """Raised when every file analysis was rejected."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "No file analyses survived the analysis stage")


class PipelineCancelled(PipelineError):
    """Raised when a run is cancelled between batches."""


__all__ = [
    "CompletionError",
    "ConfigError",
    "DocuGeniusError",
    "NoAnalysesError",
    "NoFilesError",
    "PipelineCancelled",
    "PipelineError",
    "SourceError",
]
