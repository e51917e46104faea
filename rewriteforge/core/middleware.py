# core/middleware.py

"""
Request logging middleware - feeds the metrics registry
"""

import logging
import time

from fastapi import FastAPI, Request

from rewriteforge.models.metrics import RequestLog

logger = logging.getLogger(__name__)


def add_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_request(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        entry = RequestLog(
            method=request.method,
            url=str(request.url.path) + (f"?{request.url.query}" if request.url.query else ""),
            status_code=response.status_code,
            response_time=round(elapsed_ms, 2),
            user_agent=request.headers.get("user-agent"),
            ip=request.client.host if request.client else None,
            error=f"HTTP {response.status_code}" if response.status_code >= 400 else None
        )
        request.app.state.services.metrics.log_request(entry)
        logger.debug(f"{entry.method} {entry.url} -> {entry.status_code} ({entry.response_time}ms)")
        return response
