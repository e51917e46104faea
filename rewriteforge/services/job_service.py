# services/job_service.py

"""
Job service - asynchronous rewrite jobs drained by a single worker
"""

import asyncio
import contextlib
import logging
import uuid
from collections import deque
from datetime import datetime, timedelta
from typing import Callable, Deque, Dict, Optional

from rewriteforge.models.job import Job, JobState, QueueStats
from rewriteforge.models.rewrite import Backend, Style
from rewriteforge.services.rewrite_service import RewriteService

logger = logging.getLogger(__name__)


class JobService:
    """
    In-memory job store plus a FIFO queue of job ids.

    Jobs move Pending -> Processing -> Completed | Failed and are only
    mutated by the worker task. The worker is one asyncio task that processes
    jobs strictly one at a time in submission order; when the queue is empty
    it sleeps until a submission wakes it or the poll interval elapses.
    """

    def __init__(
            self,
            rewrite_service: RewriteService,
            poll_interval: float = 0.1,
            clock: Callable[[], datetime] = datetime.now
    ):
        self.rewrite_service = rewrite_service
        self.poll_interval = poll_interval
        self._clock = clock
        self._jobs: Dict[str, Job] = {}
        self._queue: Deque[str] = deque()
        self._current_job_id: Optional[str] = None
        self._worker_task: Optional[asyncio.Task] = None
        self._wakeup: Optional[asyncio.Event] = None

    def submit_job(self, text: str, style: Style, backend: Backend) -> str:
        """Make sure the worker is running, then create and enqueue a pending job"""
        self.ensure_worker()

        job_id = str(uuid.uuid4())
        now = self._clock()

        self._jobs[job_id] = Job(
            id=job_id,
            text=text,
            style=style,
            backend=backend,
            status=JobState.PENDING,
            created_at=now,
            updated_at=now
        )
        self._queue.append(job_id)
        logger.info(f"Job submitted: {job_id} (style={Style(style).value}, backend={Backend(backend).value})")

        self._wakeup.set()
        return job_id

    def get_job(self, job_id: str) -> Optional[Job]:
        """Snapshot of a job; the stored record is never handed out"""
        job = self._jobs.get(job_id)
        return job.model_copy() if job is not None else None

    def get_queue_stats(self) -> QueueStats:
        jobs = list(self._jobs.values())
        return QueueStats(
            total_jobs=len(jobs),
            pending_jobs=len(self._queue),
            processing_jobs=sum(1 for j in jobs if j.status == JobState.PROCESSING),
            completed_jobs=sum(1 for j in jobs if j.status == JobState.COMPLETED),
            failed_jobs=sum(1 for j in jobs if j.status == JobState.FAILED),
            is_processing=self._current_job_id is not None
        )

    def cleanup_old_jobs(self, max_age_hours: float = 24) -> int:
        """Remove completed jobs last updated before the horizon. Failed jobs are kept."""
        cutoff = self._clock() - timedelta(hours=max_age_hours)
        expired = [
            job_id for job_id, job in self._jobs.items()
            if job.status == JobState.COMPLETED and job.updated_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} old jobs")
        return len(expired)

    @property
    def is_running(self) -> bool:
        return self._worker_task is not None and not self._worker_task.done()

    def ensure_worker(self) -> None:
        """Start the worker on the running loop unless a live one already exists"""
        loop = asyncio.get_running_loop()
        task = self._worker_task
        if task is not None and not task.done() and task.get_loop() is loop:
            return

        self._wakeup = asyncio.Event()
        self._worker_task = loop.create_task(self._run(self._wakeup), name="rewrite-job-worker")
        logger.info("Job worker started")

    async def wait_until_idle(self, poll_interval: float = 0.01) -> None:
        while self._queue or self._current_job_id is not None:
            await asyncio.sleep(poll_interval)

    async def stop(self) -> None:
        task, self._worker_task = self._worker_task, None
        if task is None or task.done():
            return

        task.cancel()
        if task.get_loop() is asyncio.get_running_loop():
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Job worker stopped")

    async def _run(self, wakeup: asyncio.Event) -> None:
        while True:
            if not self._queue:
                wakeup.clear()
                try:
                    await asyncio.wait_for(wakeup.wait(), timeout=self.poll_interval)
                except asyncio.TimeoutError:
                    pass
                continue

            # Removed from the queue before it is marked Processing
            job_id = self._queue.popleft()
            await self._process_job(job_id)

    async def _process_job(self, job_id: str) -> None:
        job = self._jobs.get(job_id)
        if job is None:
            logger.warning(f"Job {job_id} dequeued but not found in store, skipping")
            return

        self._current_job_id = job_id
        try:
            self._transition(job, JobState.PROCESSING)
            logger.info(f"Processing job: {job_id}")

            try:
                result = await self.rewrite_service.rewrite(job.text, job.style, job.backend)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._transition(job, JobState.FAILED, error=str(e) or type(e).__name__)
                logger.error(f"Job failed: {job_id}: {e}", exc_info=True)
            else:
                self._transition(job, JobState.COMPLETED, result=result)
                logger.info(f"Job completed: {job_id}")
        finally:
            self._current_job_id = None

    def _transition(
            self,
            job: Job,
            status: JobState,
            result: Optional[str] = None,
            error: Optional[str] = None
    ) -> None:
        if job.is_terminal:
            logger.warning(f"Job {job.id} is already {job.status.value}, ignoring transition to {status.value}")
            return

        job.status = status
        if result is not None:
            job.result = result
        if error is not None:
            job.error = error
        job.updated_at = self._clock()
