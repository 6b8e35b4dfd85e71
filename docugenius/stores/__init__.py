"""Persistent stores for analyses and generated documentation."""

from .analysis_cache import AnalysisCache, JsonAnalysisCache, NullAnalysisCache
from .documents import DocumentStore, SavedDocumentation

__all__ = [
    "AnalysisCache",
    "DocumentStore",
    "JsonAnalysisCache",
    "NullAnalysisCache",
    "SavedDocumentation",
]
