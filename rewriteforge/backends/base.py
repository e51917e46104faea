# backends/base.py

"""
Common contract for rewrite backends
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from rewriteforge.core.exceptions import UpstreamError, UpstreamErrorKind
from rewriteforge.services.cache_service import ObservableCache, make_cache_key

logger = logging.getLogger(__name__)


def build_prompt(text: str, style: str) -> str:
    return f"[*{style}*] {text}"


def map_upstream_error(sdk, exc: Exception, provider: str, label: str, key_env: str) -> UpstreamError:
    """
    Classify a provider SDK exception.

    `sdk` is the provider module (openai or anthropic); both expose the same
    exception hierarchy. APITimeoutError subclasses APIConnectionError.
    """
    if isinstance(exc, sdk.APIConnectionError):
        return UpstreamError(
            UpstreamErrorKind.NETWORK,
            f"Network error: Unable to connect to {label} API. Please check your internet connection.",
            provider
        )
    if isinstance(exc, sdk.AuthenticationError):
        return UpstreamError(
            UpstreamErrorKind.AUTH,
            f"Authentication error: Invalid {label} API key. Please check your {key_env}.",
            provider
        )
    if isinstance(exc, sdk.RateLimitError):
        return UpstreamError(
            UpstreamErrorKind.RATE_LIMIT,
            f"Rate limit error: Too many requests to {label} API. Please try again later.",
            provider
        )
    if isinstance(exc, sdk.InternalServerError):
        return UpstreamError(
            UpstreamErrorKind.SERVER_ERROR,
            f"{label} service error: Internal server error. Please try again later.",
            provider
        )

    detail = getattr(exc, "message", None) or str(exc) or "Unknown error occurred"
    return UpstreamError(UpstreamErrorKind.OTHER, f"{label} API error: {detail}", provider)


class RewriteBackend(ABC):
    """
    One text-rewriting provider plus the cache it owns.

    `resolve` is cached and referentially transparent for a given
    (text, style). `stream_resolve` is only available when
    `supports_streaming` is true and yields non-empty deltas as they arrive.
    """

    name: str = ""
    supports_streaming: bool = False
    empty_response: str = ""

    def __init__(self, cache: Optional[ObservableCache] = None):
        self.cache = cache if cache is not None else ObservableCache(self.name)

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when a required credential is missing"""

    async def resolve(self, text: str, style: str) -> str:
        self.ensure_configured()

        key = make_cache_key(text, style)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        rewritten = await self._generate(text, style)
        self.cache.set(key, rewritten)
        return rewritten

    @abstractmethod
    async def _generate(self, text: str, style: str) -> str:
        ...

    async def stream_resolve(self, text: str, style: str) -> AsyncIterator[str]:
        raise NotImplementedError(f"Backend '{self.name}' does not support streaming")
        yield  # pragma: no cover

    async def aclose(self) -> None:
        pass
