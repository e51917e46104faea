# models/__init__.py

from .rewrite import (
    Style,
    Backend,
    Granularity,
    RewriteRequest,
    RewriteResponse,
    StreamRequest
)
from .job import (
    Job,
    JobState,
    QueueStats,
    JobSubmitRequest,
    JobSubmitResponse,
    JobResultResponse
)
from .stream import StreamEvent, StreamEventType, StreamingOptions
from .metrics import CacheMetrics, RequestLog, RequestStats

__all__ = [
    'Style',
    'Backend',
    'Granularity',
    'RewriteRequest',
    'RewriteResponse',
    'StreamRequest',
    'Job',
    'JobState',
    'QueueStats',
    'JobSubmitRequest',
    'JobSubmitResponse',
    'JobResultResponse',
    'StreamEvent',
    'StreamEventType',
    'StreamingOptions',
    'CacheMetrics',
    'RequestLog',
    'RequestStats'
]
