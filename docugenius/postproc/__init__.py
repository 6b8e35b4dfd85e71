"""Markdown post-processing: rendering, badges, table of contents and lint."""

from .badges import BadgeManager
from .lint import MarkdownLinter, demote_headings
from .renderer import MarkdownRenderer
from .toc import TableOfContentsBuilder

__all__ = [
    "BadgeManager",
    "MarkdownLinter",
    "MarkdownRenderer",
    "TableOfContentsBuilder",
    "demote_headings",
]
