# models/job.py

"""
Job-related data models
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from enum import Enum
from datetime import datetime

from rewriteforge.models.rewrite import Backend, Style


class JobState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED})


class Job(BaseModel):
    id: str
    text: str
    style: Style
    backend: Backend
    status: JobState = JobState.PENDING
    result: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES


class QueueStats(BaseModel):
    total_jobs: int
    pending_jobs: int
    processing_jobs: int
    completed_jobs: int
    failed_jobs: int
    is_processing: bool


class JobSubmitRequest(BaseModel):
    text: Any = Field(None, description="Text to rewrite (max 5000 characters)")
    style: Optional[str] = Field(None, description="Target style (formal/pirate/haiku)")
    llm: Optional[str] = Field(None, description="Backend (localmoc/openai/anthropic)")


class JobSubmitResponse(BaseModel):
    job_id: str
    status: JobState
    message: str


class JobRewriteResult(BaseModel):
    original: str
    rewritten: str
    style: Style
    llm: Backend


class JobResultResponse(BaseModel):
    job_id: str
    status: JobState
    created_at: datetime
    updated_at: datetime
    text: str
    style: Style
    llm: Backend
    result: Optional[JobRewriteResult] = None
    error: Optional[str] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobResultResponse":
        result = None
        if job.status == JobState.COMPLETED and job.result is not None:
            result = JobRewriteResult(
                original=job.text,
                rewritten=job.result,
                style=job.style,
                llm=job.backend
            )
        return cls(
            job_id=job.id,
            status=job.status,
            created_at=job.created_at,
            updated_at=job.updated_at,
            text=job.text,
            style=job.style,
            llm=job.backend,
            result=result,
            error=job.error if job.status == JobState.FAILED else None
        )
