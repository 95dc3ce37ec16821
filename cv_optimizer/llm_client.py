"""
OpenAI API Client Module.

Provides a thin text-generation wrapper over the OpenAI chat completions API:
- Sync and async generation returning the raw reply text
- JSON object response format
- No retries: a failed call is reported once as UpstreamUnavailable
"""

import logging
import os
import time
from typing import Optional

from openai import AsyncOpenAI, OpenAI

from cv_optimizer.config import DEFAULT_MAX_COMPLETION_TOKENS, DEFAULT_MODEL
from cv_optimizer.exceptions import UpstreamUnavailable

UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable. Please try again later."

logger = logging.getLogger("cv_optimizer.llm")


class LLMClient:
    """
    OpenAI text-generation client.

    Any object with generate(prompt) -> str and
    async generate_async(prompt) -> str can stand in for this class.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_completion_tokens: int = DEFAULT_MAX_COMPLETION_TOKENS,
    ):
        """
        Initialize the LLM client.

        Args:
            api_key: OpenAI API key. If None, reads from OPENAI_API_KEY env var.
            model: Model to use for chat completions.
            max_completion_tokens: Upper bound on reply length.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")

        if not self.api_key:
            raise ValueError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment variable "
                "or pass api_key to the constructor."
            )

        # * Sync and async clients
        self.client = OpenAI(api_key=self.api_key)
        self.async_client = AsyncOpenAI(api_key=self.api_key)
        self.model = model
        self.max_completion_tokens = max_completion_tokens

    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the reply text (sync).

        Args:
            prompt: User prompt.

        Returns:
            Raw reply text; may be empty.

        Raises:
            UpstreamUnavailable: If the API call fails.
        """
        start = time.perf_counter()
        try:
            response = self.client.chat.completions.create(**self._build_chat_kwargs(prompt))
        except Exception as e:
            logger.error("LLM call failed model=%s error=%s", self.model, e, exc_info=True)
            raise UpstreamUnavailable(UNAVAILABLE_MESSAGE) from e

        return self._extract_text(response, time.perf_counter() - start)

    async def generate_async(self, prompt: str) -> str:
        """
        Send a prompt and return the reply text (async).

        Args:
            prompt: User prompt.

        Returns:
            Raw reply text; may be empty.

        Raises:
            UpstreamUnavailable: If the API call fails.
        """
        start = time.perf_counter()
        try:
            response = await self.async_client.chat.completions.create(
                **self._build_chat_kwargs(prompt)
            )
        except Exception as e:
            logger.error("LLM async call failed model=%s error=%s", self.model, e, exc_info=True)
            raise UpstreamUnavailable(UNAVAILABLE_MESSAGE) from e

        return self._extract_text(response, time.perf_counter() - start)

    def _build_chat_kwargs(self, prompt: str) -> dict:
        """Build kwargs for chat completion request."""
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_completion_tokens": self.max_completion_tokens,
            "response_format": {"type": "json_object"},
        }

    def _extract_text(self, response, duration: float) -> str:
        """Pull the reply text out of a chat completion response."""
        usage = getattr(response, "usage", None)
        token_summary = ""
        if usage:
            prompt_tokens = getattr(usage, "prompt_tokens", None)
            completion_tokens = getattr(usage, "completion_tokens", None)
            total_tokens = getattr(usage, "total_tokens", None)
            token_summary = (
                f" prompt={prompt_tokens} completion={completion_tokens} total={total_tokens}"
            )

        choices = getattr(response, "choices", None) or []
        content = getattr(choices[0].message, "content", None) if choices else None

        logger.info(
            "LLM success model=%s duration=%.3fs chars=%s%s",
            self.model,
            duration,
            len(content) if isinstance(content, str) else 0,
            token_summary,
        )
        return content or ""


def get_client(
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    max_completion_tokens: int = DEFAULT_MAX_COMPLETION_TOKENS,
) -> LLMClient:
    """
    Get a configured LLM client instance.

    Args:
        api_key: Optional API key override.
        model: Chat model name.
        max_completion_tokens: Upper bound on reply length.

    Returns:
        Configured LLMClient instance.
    """
    return LLMClient(api_key=api_key, model=model, max_completion_tokens=max_completion_tokens)
