"""Path-based file categorization and prioritization."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Sequence

from ..models import SourceFile


class Category(str, Enum):
    CORE = "core"
    API = "api"
    COMPONENTS = "components"
    CONFIG = "config"
    UTILS = "utils"
    OTHER = "other"


# Evaluated in order; the first rule with a matching fragment wins.
_CATEGORY_RULES: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.CORE, ("main.", "index.", "app.")),
    (Category.API, ("/api/", "/routes/", "route.")),
    (Category.COMPONENTS, ("/components/", "/ui/")),
    (Category.CONFIG, ("config", ".json", ".yaml")),
    (Category.UTILS, ("/utils/", "/lib/", "/helpers/")),
)

CATEGORY_WEIGHTS: Dict[Category, int] = {
    Category.CORE: 100,
    Category.API: 80,
    Category.COMPONENTS: 60,
    Category.UTILS: 40,
    Category.CONFIG: 20,
    Category.OTHER: 10,
}


def classify(file: SourceFile) -> Category:
    """Return the category for ``file`` based on case-insensitive path fragments."""
    path = file.path.lower()
    for category, fragments in _CATEGORY_RULES:
        if any(fragment in path for fragment in fragments):
            return category
    return Category.OTHER


def categorize(files: Iterable[SourceFile]) -> Dict[Category, List[SourceFile]]:
    """Group files by category, preserving input order within each group."""
    groups: Dict[Category, List[SourceFile]] = {}
    for file in files:
        groups.setdefault(classify(file), []).append(file)
    return groups


def prioritize(files: Sequence[SourceFile]) -> List[SourceFile]:
    """Return a new list ordered by category weight, highest first.

    ``sorted`` is stable, so files sharing a category keep their input order
    and repeated runs over the same input produce the same ordering.
    """
    return sorted(files, key=lambda file: CATEGORY_WEIGHTS[classify(file)], reverse=True)


__all__ = ["CATEGORY_WEIGHTS", "Category", "categorize", "classify", "prioritize"]
