"""Adapter around OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import asyncio
import functools
import json
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import CompletionError
from ..logging import get_logger

logger = get_logger("llm")


class CompletionService(Protocol):
    """Text/JSON completion capability consumed by the pipeline."""

    async def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
        system: str | None = None,
    ) -> str:
        ...


@dataclass
class LLMRequest:
    """A single chat completion call, ready to be posted."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    json_mode: bool
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def messages(self) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = []
        if self.system:
            messages.append({"role": "system", "content": self.system})
        messages.append({"role": "user", "content": self.prompt})
        return messages

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"model": self.model, "messages": self.messages()}
        if self.temperature is not None:
            body["temperature"] = self.temperature
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        if self.json_mode:
            body["response_format"] = {"type": "json_object"}
        return body

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


Transport = Callable[[LLMRequest], str]


class LLMRunner:
    """Executes prompts against the configured chat completion endpoint.

    ``complete`` is the async entrypoint used by the pipeline; it runs the
    blocking transport in the default executor so a batch of analyses can be
    in flight at once.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_MODEL_KEYS = ("DOCUGENIUS_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("DOCUGENIUS_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("DOCUGENIUS_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        request_timeout: Optional[float] = 60.0,
        runner: Transport | None = None,
    ) -> None:
        self.model = model or _first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        resolved_url = base_url or _first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        self.base_url = resolved_url.rstrip("/")
        self.api_key = api_key or _first_env_value(self.ENV_API_KEY_KEYS)
        self.request_timeout = request_timeout
        self._transport = runner or post_chat_completion

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> str:
        """Send the prompt and return the response text (blocking)."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=model or self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        started = time.perf_counter()
        text = self._transport(request)
        logger.debug(
            "%s completion (%s) returned %d chars in %.2fs",
            "JSON" if json_mode else "Text",
            request.model,
            len(text),
            time.perf_counter() - started,
        )
        return text

    async def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
        system: str | None = None,
    ) -> str:
        loop = asyncio.get_running_loop()
        call = functools.partial(
            self.run,
            prompt,
            system=system,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            json_mode=json_mode,
        )
        return await loop.run_in_executor(None, call)


def post_chat_completion(request: LLMRequest) -> str:
    """POST ``request`` with urllib and return the first choice's text."""
    http_request = Request(
        request.endpoint,
        data=json.dumps(request.payload()).encode("utf-8"),
        headers=request.headers(),
        method="POST",
    )
    try:
        with urlopen(http_request, timeout=request.request_timeout or 60.0) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:  # pragma: no cover - depends on provider
        detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
        raise CompletionError(
            f"Completion request failed with status {exc.code}: {detail.strip() or exc.reason}"
        ) from exc
    except URLError as exc:  # pragma: no cover - depends on network
        raise CompletionError(f"Completion request failed: {exc.reason}") from exc
    except TimeoutError as exc:  # pragma: no cover - depends on network
        raise CompletionError("Completion request timed out") from exc

    try:
        body = json.loads(raw.decode("utf-8"))
    except json.JSONDecodeError as exc:
        raise CompletionError("Completion endpoint returned invalid JSON") from exc

    content = _first_choice_text(body)
    if not content:
        raise CompletionError("Completion endpoint returned an empty response")
    return content.strip()


def _first_choice_text(body: object) -> str:
    if not isinstance(body, dict):
        return ""
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    first = choices[0]
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    # Legacy completions endpoints put the text on the choice itself.
    text = first.get("text")
    return text if isinstance(text, str) else ""


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


__all__ = ["CompletionService", "LLMRequest", "LLMRunner", "post_chat_completion"]
