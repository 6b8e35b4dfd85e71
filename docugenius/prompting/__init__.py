"""Prompt construction for the completion service."""

from .builder import PromptBuilder, truncate_content

__all__ = ["PromptBuilder", "truncate_content"]
