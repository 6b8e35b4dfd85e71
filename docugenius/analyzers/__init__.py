"""File classification, project context, and analysis decoding."""

from __future__ import annotations

from .categories import CATEGORY_WEIGHTS, Category, categorize, classify, prioritize
from .context import UNKNOWN_FRAMEWORK, build_project_context, detect_framework

__all__ = [
    "CATEGORY_WEIGHTS",
    "Category",
    "UNKNOWN_FRAMEWORK",
    "build_project_context",
    "categorize",
    "classify",
    "detect_framework",
    "prioritize",
]
