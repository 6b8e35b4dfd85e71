"""Completion service adapters."""

from .runner import CompletionService, LLMRequest, LLMRunner, post_chat_completion

__all__ = ["CompletionService", "LLMRequest", "LLMRunner", "post_chat_completion"]
