# main.py

"""
RewriteForge API - Main Entry Point
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rewriteforge.core.config import Settings, settings as default_settings
from rewriteforge.core.dependencies import build_services
from rewriteforge.core.exceptions import RewriteError
from rewriteforge.core.logging_config import setup_logging
from rewriteforge.core.middleware import add_request_logging
from rewriteforge.routers import job_router, metrics_router, rewrite_router, stream_router

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_SECONDS = 5


def create_app(
        settings: Optional[Settings] = None,
        openai_client: Optional[Any] = None,
        anthropic_client: Optional[Any] = None
) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)
    services = build_services(settings, openai_client=openai_client, anthropic_client=anthropic_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.app_name} v{settings.app_version} starting")
        yield
        # Accepted jobs get a short grace period before the worker is cancelled
        try:
            await asyncio.wait_for(services.jobs.wait_until_idle(), timeout=SHUTDOWN_DRAIN_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Shutting down with jobs still queued")
        await services.jobs.stop()
        await services.rewrite.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.services = services

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_request_logging(app)

    # Include routers
    app.include_router(rewrite_router.router, prefix=settings.api_prefix)
    app.include_router(job_router.router, prefix=settings.api_prefix)
    app.include_router(stream_router.router, prefix=settings.api_prefix)
    app.include_router(metrics_router.router, prefix=settings.api_prefix)

    @app.exception_handler(RewriteError)
    async def rewrite_error_handler(request: Request, exc: RewriteError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    async def root():
        """API root endpoint"""
        prefix = settings.api_prefix
        return {
            "message": "RewriteForge Service - Turning plain text into a new style",
            "name": settings.app_name,
            "version": settings.app_version,
            "endpoints": {
                "rewrite": f"{prefix}/rewrite",
                "submit": f"{prefix}/rewrite/submit",
                "job_result": f"{prefix}/rewrite/result/{{job_id}}",
                "queue_stats": f"{prefix}/rewrite/queue/stats",
                "stream": f"{prefix}/rewrite/stream",
                "stream_mock": f"{prefix}/rewrite/stream/mock",
                "metrics": f"{prefix}/metrics/overview",
                "health": "/health",
                "docs": "/docs"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "version": settings.app_version
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "rewriteforge.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug
    )
