# backends/openai_backend.py

"""
OpenAI backend using the official async SDK
"""

import logging
from typing import Any, AsyncIterator, Optional

import openai
from openai import AsyncOpenAI

from rewriteforge.backends.base import RewriteBackend, build_prompt, map_upstream_error
from rewriteforge.core.exceptions import ConfigurationError, UpstreamError
from rewriteforge.services.cache_service import ObservableCache

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "No response from OpenAI."


class OpenAIBackend(RewriteBackend):
    name = "openai"
    supports_streaming = True
    empty_response = EMPTY_RESPONSE

    def __init__(
            self,
            cache: Optional[ObservableCache] = None,
            api_key: Optional[str] = None,
            model: str = "gpt-4",
            max_tokens: int = 1024,
            client: Optional[Any] = None
    ):
        super().__init__(cache)
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client = client

        if not self.api_key and client is None:
            logger.warning("OPENAI_API_KEY is not set. OpenAI backend will not be available.")

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def ensure_configured(self) -> None:
        if not self.api_key and self._client is None:
            raise ConfigurationError(
                "OpenAI service is not configured. Please set OPENAI_API_KEY in your environment variables."
            )

    def _request_params(self, text: str, style: str) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(text, style)}],
            "max_tokens": self.max_tokens,
        }

    def _upstream_error(self, exc: Exception) -> UpstreamError:
        return map_upstream_error(openai, exc, self.name, "OpenAI", "OPENAI_API_KEY")

    async def _generate(self, text: str, style: str) -> str:
        try:
            completion = await self.client.chat.completions.create(**self._request_params(text, style))
        except openai.OpenAIError as e:
            logger.error(f"OpenAI error: {e}", exc_info=True)
            raise self._upstream_error(e) from e

        content = completion.choices[0].message.content if completion.choices else None
        return (content or "").strip() or EMPTY_RESPONSE

    async def stream_resolve(self, text: str, style: str) -> AsyncIterator[str]:
        self.ensure_configured()
        try:
            stream = await self.client.chat.completions.create(
                **self._request_params(text, style), stream=True
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except openai.OpenAIError as e:
            logger.error(f"OpenAI streaming error: {e}", exc_info=True)
            raise self._upstream_error(e) from e

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
