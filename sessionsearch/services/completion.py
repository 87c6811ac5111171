"""Client for the hosted chat-completion API (Groq, OpenAI-compatible)."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

from openai import AsyncOpenAI, OpenAIError

from sessionsearch import config

logger = logging.getLogger("sessionsearch.completion")

_PLACEHOLDER_KEYS = {"", "your_groq_api_key_here"}


class CompletionUnavailableError(RuntimeError):
    """No usable API key is configured."""


class CompletionError(RuntimeError):
    """The completion API call failed."""


@dataclass
class CompletionOptions:
    model: str = field(default_factory=lambda: config.AI_MODEL)
    temperature: float = field(default_factory=lambda: config.AI_TEMPERATURE)
    max_tokens: int = field(default_factory=lambda: config.AI_MAX_TOKENS)
    top_p: float = field(default_factory=lambda: config.AI_TOP_P)
    stop: Optional[list[str]] = None

    @classmethod
    def from_overrides(cls, **overrides: Any) -> "CompletionOptions":
        options = cls()
        for key, value in overrides.items():
            if value is not None and hasattr(options, key):
                setattr(options, key, value)
        return options


class CompletionClient:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        key = (api_key if api_key is not None else config.GROQ_API_KEY).strip()
        self._client: Optional[AsyncOpenAI] = None
        if key in _PLACEHOLDER_KEYS:
            logger.warning("GROQ_API_KEY not set. AI features will be disabled.")
            return
        self._client = AsyncOpenAI(api_key=key, base_url=base_url or config.AI_BASE_URL)
        logger.info("Completion client initialized (base_url=%s)", base_url or config.AI_BASE_URL)

    def is_available(self) -> bool:
        return self._client is not None

    def _request(self, prompt: str, options: CompletionOptions, *, stream: bool) -> dict[str, Any]:
        return {
            "messages": [{"role": "user", "content": prompt}],
            "model": options.model,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "top_p": options.top_p,
            "stop": options.stop,
            "stream": stream,
        }

    def _require_client(self) -> AsyncOpenAI:
        if self._client is None:
            raise CompletionUnavailableError(
                "AI service is not available. Please check your API key."
            )
        return self._client

    async def complete(self, prompt: str, options: Optional[CompletionOptions] = None) -> str:
        client = self._require_client()
        options = options or CompletionOptions()
        try:
            completion = await client.chat.completions.create(**self._request(prompt, options, stream=False))
        except OpenAIError as exc:
            logger.error("Error calling completion API: %s", exc)
            raise CompletionError(f"Failed to get AI response: {exc}") from exc
        if not completion.choices:
            return "No response from AI"
        return completion.choices[0].message.content or "No response from AI"

    async def stream(
        self,
        prompt: str,
        options: Optional[CompletionOptions] = None,
    ) -> AsyncIterator[str]:
        client = self._require_client()
        options = options or CompletionOptions()
        try:
            chunks = await client.chat.completions.create(**self._request(prompt, options, stream=True))
            async for chunk in chunks:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content or ""
                if content:
                    yield content
        except OpenAIError as exc:
            logger.error("Error streaming from completion API: %s", exc)
            raise CompletionError(f"Failed to stream AI response: {exc}") from exc
