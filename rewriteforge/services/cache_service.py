# services/cache_service.py

"""
Cache service - per-backend response memo with hit/miss accounting
"""

import logging
import time
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple

from rewriteforge.models.metrics import CacheMetrics
from rewriteforge.services.metrics_service import MetricsStore

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


def make_cache_key(text: str, style: str) -> CacheKey:
    """Backend is not part of the key: every backend owns its own cache"""
    return (text, style)


class ObservableCache:
    """
    Key -> rewritten text memo owned by exactly one backend.

    Every `get` is an access: it counts as a hit or a miss both on this
    cache's own metrics and on the shared registry under `backend_name`.
    `max_size` (LRU) and `ttl_seconds` are optional; None means unbounded.
    """

    def __init__(
            self,
            backend_name: str,
            metrics_store: Optional[MetricsStore] = None,
            max_size: Optional[int] = None,
            ttl_seconds: Optional[float] = None,
            clock: Callable[[], float] = time.monotonic
    ):
        self.backend_name = backend_name
        self.metrics_store = metrics_store
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, Tuple[str, Optional[float]]]" = OrderedDict()
        self._metrics = CacheMetrics()

    def get(self, key: CacheKey) -> Optional[str]:
        value = self._lookup(key)
        if value is not None:
            self._metrics.record_hit()
            if self.metrics_store is not None:
                self.metrics_store.record_hit(self.backend_name)
            logger.debug(f"[{self.backend_name}] Cache HIT for: {key!r}")
        else:
            self._metrics.record_miss()
            if self.metrics_store is not None:
                self.metrics_store.record_miss(self.backend_name)
            logger.debug(f"[{self.backend_name}] Cache MISS for: {key!r}")
        return value

    def _lookup(self, key: CacheKey) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def set(self, key: CacheKey, value: str) -> None:
        expires_at = self._clock() + self.ttl_seconds if self.ttl_seconds is not None else None
        self._entries[key] = (value, expires_at)
        self._entries.move_to_end(key)

        if self.max_size is not None:
            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"[{self.backend_name}] Evicted: {evicted!r}")

    def has(self, key: CacheKey) -> bool:
        """Presence check that does not count as an access"""
        return self._lookup(key) is not None

    def delete(self, key: CacheKey) -> bool:
        return self._entries.pop(key, None) is not None

    def keys(self) -> List[CacheKey]:
        return list(self._entries.keys())

    @property
    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.reset_metrics()

    def get_metrics(self) -> CacheMetrics:
        return self._metrics.model_copy()

    def reset_metrics(self) -> None:
        self._metrics = CacheMetrics()
