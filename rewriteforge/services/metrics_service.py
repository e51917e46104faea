# services/metrics_service.py

"""
Metrics service - process-wide cache counters and request log
"""

import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Union

from rewriteforge.models.metrics import CacheMetrics, RequestLog, RequestStats

logger = logging.getLogger(__name__)


class MetricsStore:
    def __init__(self, max_logs: int = 1000):
        self.max_logs = max_logs
        self._cache_metrics: Dict[str, CacheMetrics] = {}
        self._request_logs: Deque[RequestLog] = deque(maxlen=max_logs)

    def record_hit(self, backend: str) -> None:
        self._get_or_create(backend).record_hit()

    def record_miss(self, backend: str) -> None:
        self._get_or_create(backend).record_miss()

    def get_metrics(self, backend: Optional[str] = None) -> Union[CacheMetrics, Dict[str, CacheMetrics]]:
        """Metrics for one backend (zeroed if unseen) or a snapshot of all of them"""
        if backend is not None:
            metrics = self._cache_metrics.get(backend)
            return metrics.model_copy() if metrics else CacheMetrics()
        return {name: metrics.model_copy() for name, metrics in self._cache_metrics.items()}

    def _get_or_create(self, backend: str) -> CacheMetrics:
        if backend not in self._cache_metrics:
            self._cache_metrics[backend] = CacheMetrics()
        return self._cache_metrics[backend]

    def log_request(self, entry: RequestLog) -> None:
        self._request_logs.append(entry)

    def get_request_logs(self, limit: int = 100) -> List[RequestLog]:
        """Most recent request logs, newest first"""
        if limit <= 0:
            return []
        return list(self._request_logs)[-limit:][::-1]

    def get_request_stats(self) -> RequestStats:
        logs = list(self._request_logs)
        if not logs:
            return RequestStats()

        distribution: Dict[int, int] = {}
        for log in logs:
            distribution[log.status_code] = distribution.get(log.status_code, 0) + 1

        return RequestStats(
            total_requests=len(logs),
            average_response_time=sum(log.response_time for log in logs) / len(logs),
            status_code_distribution=distribution,
            recent_errors=sum(1 for log in logs if log.status_code >= 400)
        )

    def get_overview(self) -> dict:
        services = self.get_metrics()
        return {
            "cache": {
                "services": {name: metrics.model_dump() for name, metrics in services.items()},
                "summary": {
                    "total_hits": sum(m.hits for m in services.values()),
                    "total_misses": sum(m.misses for m in services.values()),
                    "overall_hit_rate": sum(m.hit_rate for m in services.values()) / max(len(services), 1)
                }
            },
            "requests": self.get_request_stats().model_dump(),
            "recent_activity": [log.model_dump(mode="json") for log in self.get_request_logs(10)]
        }

    def reset(self) -> None:
        """Clear all cache metrics and request logs"""
        self._cache_metrics.clear()
        self._request_logs.clear()
        logger.info("Metrics registry reset")
