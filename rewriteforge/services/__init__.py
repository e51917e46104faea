# services/__init__.py

# Only leaf services are re-exported here: backends import the cache, and the
# rewrite/job/streaming services import the backends.
from .cache_service import ObservableCache, make_cache_key
from .metrics_service import MetricsStore

__all__ = ['ObservableCache', 'make_cache_key', 'MetricsStore']
