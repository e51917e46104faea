# services/rewrite_service.py

"""
Rewrite service - owns one adapter per backend and dispatches by Backend
"""

import logging
from typing import Dict, Optional

from rewriteforge.backends.anthropic_backend import AnthropicBackend
from rewriteforge.backends.base import RewriteBackend
from rewriteforge.backends.localmoc_backend import LocalMockBackend
from rewriteforge.backends.openai_backend import OpenAIBackend
from rewriteforge.core.config import Settings
from rewriteforge.models.metrics import CacheMetrics
from rewriteforge.models.rewrite import Backend, Style
from rewriteforge.services.cache_service import ObservableCache
from rewriteforge.services.metrics_service import MetricsStore

logger = logging.getLogger(__name__)


class RewriteService:
    def __init__(self, backends: Dict[Backend, RewriteBackend]):
        missing = [b.value for b in Backend if b not in backends]
        if missing:
            raise ValueError(f"No adapter registered for backend(s): {', '.join(missing)}")
        self._backends = dict(backends)

    @classmethod
    def from_settings(
            cls,
            settings: Settings,
            metrics_store: Optional[MetricsStore] = None,
            openai_client=None,
            anthropic_client=None
    ) -> "RewriteService":
        """Build the three adapters, each with a cache of its own"""
        def cache_for(backend: Backend) -> ObservableCache:
            return ObservableCache(
                backend.value,
                metrics_store,
                max_size=settings.cache_max_size,
                ttl_seconds=settings.cache_ttl_seconds
            )

        return cls({
            Backend.LOCALMOC: LocalMockBackend(cache_for(Backend.LOCALMOC)),
            Backend.OPENAI: OpenAIBackend(
                cache_for(Backend.OPENAI),
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                max_tokens=settings.openai_max_tokens,
                client=openai_client
            ),
            Backend.ANTHROPIC: AnthropicBackend(
                cache_for(Backend.ANTHROPIC),
                api_key=settings.anthropic_api_key,
                model=settings.anthropic_model,
                max_tokens=settings.anthropic_max_tokens,
                client=anthropic_client
            ),
        })

    def get_backend(self, backend: Backend) -> RewriteBackend:
        return self._backends[Backend(backend)]

    async def rewrite(self, text: str, style: Style, backend: Backend) -> str:
        """Synchronous path: resolve and let adapter errors reach the caller"""
        adapter = self.get_backend(backend)
        logger.info(f"Rewriting with backend={adapter.name}, style={Style(style).value}, length={len(text)}")
        return await adapter.resolve(text, Style(style).value)

    def get_cache_metrics(self) -> Dict[str, CacheMetrics]:
        return {adapter.name: adapter.cache.get_metrics() for adapter in self._backends.values()}

    def reset_metrics(self) -> None:
        for adapter in self._backends.values():
            adapter.cache.reset_metrics()

    async def aclose(self) -> None:
        for adapter in self._backends.values():
            await adapter.aclose()
