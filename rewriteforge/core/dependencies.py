# core/dependencies.py

"""
Service wiring - one set of long-lived components per application
"""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from rewriteforge.core.config import Settings
from rewriteforge.services.job_service import JobService
from rewriteforge.services.metrics_service import MetricsStore
from rewriteforge.services.rewrite_service import RewriteService
from rewriteforge.services.streaming_service import StreamingService


@dataclass
class ServiceContainer:
    settings: Settings
    metrics: MetricsStore
    rewrite: RewriteService
    jobs: JobService
    streaming: StreamingService


def build_services(
        settings: Settings,
        openai_client: Optional[Any] = None,
        anthropic_client: Optional[Any] = None
) -> ServiceContainer:
    metrics = MetricsStore(max_logs=settings.max_request_logs)
    rewrite = RewriteService.from_settings(
        settings,
        metrics,
        openai_client=openai_client,
        anthropic_client=anthropic_client
    )
    return ServiceContainer(
        settings=settings,
        metrics=metrics,
        rewrite=rewrite,
        jobs=JobService(rewrite, poll_interval=settings.worker_poll_interval_ms / 1000),
        streaming=StreamingService(rewrite, cached_replay_delay_ms=settings.cached_replay_delay_ms)
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
