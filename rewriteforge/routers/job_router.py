# routers/job_router.py

"""
Job Management API Routes
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from rewriteforge.core.dependencies import ServiceContainer, get_services
from rewriteforge.models.job import JobResultResponse, JobState, JobSubmitRequest, JobSubmitResponse
from rewriteforge.models.rewrite import Backend, Style
from rewriteforge.utils.validate import validate_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rewrite", tags=["Jobs"])


@router.post("/submit", status_code=202, response_model=JobSubmitResponse)
async def submit_rewrite_job(request: JobSubmitRequest, services: ServiceContainer = Depends(get_services)):
    """Queue a rewrite and return its job id immediately"""
    settings = services.settings
    validate_request(request.llm, request.text, request.style, settings.max_text_length).raise_if_invalid()

    job_id = services.jobs.submit_job(
        request.text,
        Style(request.style or settings.default_style),
        Backend(request.llm or settings.default_backend)
    )

    return JobSubmitResponse(
        job_id=job_id,
        status=JobState.PENDING,
        message=f"Job submitted successfully. Use GET {settings.api_prefix}/rewrite/result/{job_id} to check status."
    )


@router.get("/result/{job_id}", response_model=JobResultResponse)
async def get_job_result(job_id: str, services: ServiceContainer = Depends(get_services)):
    """Get status of a rewrite job, with its result once completed"""
    job = services.jobs.get_job(job_id)

    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    return JobResultResponse.from_job(job)


@router.get("/queue/stats")
async def get_queue_statistics(services: ServiceContainer = Depends(get_services)):
    """Queue and job store counters"""
    return {
        "queue": services.jobs.get_queue_stats().model_dump(),
        "timestamp": datetime.now().isoformat()
    }


@router.delete("/jobs")
async def cleanup_jobs(
        max_age_hours: Optional[float] = Query(None, ge=0, description="Remove completed jobs older than this"),
        services: ServiceContainer = Depends(get_services)
):
    """Remove completed jobs past the retention horizon"""
    horizon = max_age_hours if max_age_hours is not None else services.settings.job_max_age_hours
    removed = services.jobs.cleanup_old_jobs(horizon)

    return {
        "message": f"Cleared {removed} completed jobs",
        "removed": removed,
        "active_jobs": services.jobs.get_queue_stats().total_jobs
    }
