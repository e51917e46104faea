# routers/metrics_router.py

"""
Observability API Routes
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from rewriteforge.core.dependencies import ServiceContainer, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/metrics", tags=["Metrics"])


@router.get("/cache")
async def get_cache_metrics(
        service: Optional[str] = Query(None, description="Backend name (localmoc/openai/anthropic)"),
        services: ServiceContainer = Depends(get_services)
):
    """Cache hit/miss counters for one backend or all of them"""
    if service:
        return {
            "service": service,
            "metrics": services.metrics.get_metrics(service).model_dump(),
            "timestamp": datetime.now().isoformat()
        }

    return {
        "all_services": {name: m.model_dump() for name, m in services.metrics.get_metrics().items()},
        "timestamp": datetime.now().isoformat()
    }


@router.get("/requests")
async def get_request_metrics(
        limit: int = Query(100, ge=1, le=1000),
        services: ServiceContainer = Depends(get_services)
):
    """Request statistics and the most recent request logs"""
    return {
        "statistics": services.metrics.get_request_stats().model_dump(),
        "recent_logs": [log.model_dump(mode="json") for log in services.metrics.get_request_logs(limit)],
        "timestamp": datetime.now().isoformat()
    }


@router.get("/overview")
async def get_metrics_overview(services: ServiceContainer = Depends(get_services)):
    overview = services.metrics.get_overview()
    overview["timestamp"] = datetime.now().isoformat()
    return overview


@router.post("/reset")
async def reset_metrics(services: ServiceContainer = Depends(get_services)):
    """Clear cache metrics (registry and per-backend) and request logs"""
    services.metrics.reset()
    services.rewrite.reset_metrics()
    logger.info("All metrics have been reset")

    return {
        "message": "All metrics have been reset",
        "timestamp": datetime.now().isoformat()
    }
