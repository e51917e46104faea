# backends/anthropic_backend.py

"""
Anthropic backend using the official async SDK
"""

import logging
from typing import Any, AsyncIterator, Optional

import anthropic
from anthropic import AsyncAnthropic

from rewriteforge.backends.base import RewriteBackend, build_prompt, map_upstream_error
from rewriteforge.core.exceptions import ConfigurationError, UpstreamError
from rewriteforge.services.cache_service import ObservableCache

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "No text response from Claude."


class AnthropicBackend(RewriteBackend):
    name = "anthropic"
    supports_streaming = True
    empty_response = EMPTY_RESPONSE

    def __init__(
            self,
            cache: Optional[ObservableCache] = None,
            api_key: Optional[str] = None,
            model: str = "claude-3-opus-20240229",
            max_tokens: int = 1024,
            client: Optional[Any] = None
    ):
        super().__init__(cache)
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client = client

        if not self.api_key and client is None:
            logger.warning("ANTHROPIC_API_KEY is not set. Anthropic backend will not be available.")

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    def ensure_configured(self) -> None:
        if not self.api_key and self._client is None:
            raise ConfigurationError(
                "Anthropic service is not configured. Please set ANTHROPIC_API_KEY in your environment variables."
            )

    def _request_params(self, text: str, style: str) -> dict:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": build_prompt(text, style)}],
        }

    def _upstream_error(self, exc: Exception) -> UpstreamError:
        return map_upstream_error(anthropic, exc, self.name, "Anthropic", "ANTHROPIC_API_KEY")

    async def _generate(self, text: str, style: str) -> str:
        try:
            response = await self.client.messages.create(**self._request_params(text, style))
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic error: {e}", exc_info=True)
            raise self._upstream_error(e) from e

        for block in response.content:
            if block.type == "text":
                return block.text.strip() or EMPTY_RESPONSE
        return EMPTY_RESPONSE

    async def stream_resolve(self, text: str, style: str) -> AsyncIterator[str]:
        self.ensure_configured()
        try:
            async with self.client.messages.stream(**self._request_params(text, style)) as stream:
                async for delta in stream.text_stream:
                    if delta:
                        yield delta
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic streaming error: {e}", exc_info=True)
            raise self._upstream_error(e) from e

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
