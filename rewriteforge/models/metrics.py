# models/metrics.py

"""
Observability data models
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime


class CacheMetrics(BaseModel):
    hits: int = 0
    misses: int = 0
    total_requests: int = 0
    hit_rate: float = 0.0

    def record_hit(self) -> None:
        self.hits += 1
        self.total_requests += 1
        self._update_hit_rate()

    def record_miss(self) -> None:
        self.misses += 1
        self.total_requests += 1
        self._update_hit_rate()

    def _update_hit_rate(self) -> None:
        self.hit_rate = (self.hits / self.total_requests) * 100 if self.total_requests > 0 else 0.0


class RequestLog(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    method: str
    url: str
    status_code: int
    response_time: float
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    error: Optional[str] = None


class RequestStats(BaseModel):
    total_requests: int = 0
    average_response_time: float = 0.0
    status_code_distribution: Dict[int, int] = Field(default_factory=dict)
    recent_errors: int = 0
