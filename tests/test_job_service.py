from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from rewriteforge.models.job import JobState
from rewriteforge.models.rewrite import Backend, Style
from rewriteforge.services.job_service import JobService
from rewriteforge.services.rewrite_service import RewriteService


class RecordingRewriteService:
    """Resolves in submission order and remembers what each call observed."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.seen: list[str] = []
        self.processing_counts: list[int] = []
        self.queue_contains_current: list[bool] = []
        self.jobs: JobService | None = None
        self.gate: asyncio.Event | None = None

    async def rewrite(self, text: str, style: Style, backend: Backend) -> str:
        self.seen.append(text)
        if self.jobs is not None:
            stats = self.jobs.get_queue_stats()
            self.processing_counts.append(stats.processing_jobs)
            self.queue_contains_current.append(self.jobs._current_job_id in self.jobs._queue)
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if text in self.fail_on:
            raise RuntimeError(f"cannot rewrite {text}")
        return f"[*{Style(style).value}*] {text}"


def _service(rewrite, **kwargs) -> JobService:
    jobs = JobService(rewrite, poll_interval=0.01, **kwargs)
    rewrite.jobs = jobs
    return jobs


@pytest.mark.anyio
async def test_jobs_run_in_submission_order_one_at_a_time():
    rewrite = RecordingRewriteService()
    jobs = _service(rewrite)

    ids = [jobs.submit_job(text, Style.FORMAL, Backend.LOCALMOC) for text in ("a", "b", "c", "d")]
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    assert rewrite.seen == ["a", "b", "c", "d"]
    assert rewrite.processing_counts == [1, 1, 1, 1]
    assert rewrite.queue_contains_current == [False] * 4
    assert [jobs.get_job(i).status for i in ids] == [JobState.COMPLETED] * 4
    await jobs.stop()


@pytest.mark.anyio
async def test_completed_result_matches_synchronous_rewrite(rewrite_service):
    jobs = JobService(rewrite_service, poll_interval=0.01)

    job_id = jobs.submit_job("Hello world", Style.PIRATE, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    job = jobs.get_job(job_id)
    assert job.status == JobState.COMPLETED
    assert job.result == await rewrite_service.rewrite("Hello world", Style.PIRATE, Backend.LOCALMOC)
    assert job.error is None
    assert job.updated_at >= job.created_at
    await jobs.stop()


@pytest.mark.anyio
async def test_failed_job_records_error_and_worker_continues():
    rewrite = RecordingRewriteService(fail_on={"bad"})
    jobs = _service(rewrite)

    bad = jobs.submit_job("bad", Style.FORMAL, Backend.OPENAI)
    good = jobs.submit_job("good", Style.FORMAL, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    failed = jobs.get_job(bad)
    assert failed.status == JobState.FAILED
    assert failed.error == "cannot rewrite bad"
    assert failed.result is None
    assert jobs.get_job(good).status == JobState.COMPLETED
    await jobs.stop()


@pytest.mark.anyio
async def test_configuration_error_fails_the_job(settings):
    jobs = JobService(RewriteService.from_settings(settings), poll_interval=0.01)

    job_id = jobs.submit_job("Hello", Style.FORMAL, Backend.ANTHROPIC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    job = jobs.get_job(job_id)
    assert job.status == JobState.FAILED
    assert "ANTHROPIC_API_KEY" in job.error
    await jobs.stop()


@pytest.mark.anyio
async def test_status_is_observable_while_processing():
    rewrite = RecordingRewriteService()
    rewrite.gate = asyncio.Event()
    jobs = _service(rewrite)

    first = jobs.submit_job("first", Style.HAIKU, Backend.LOCALMOC)
    second = jobs.submit_job("second", Style.HAIKU, Backend.LOCALMOC)
    while not rewrite.seen:
        await asyncio.sleep(0.01)

    assert jobs.get_job(first).status == JobState.PROCESSING
    assert jobs.get_job(second).status == JobState.PENDING
    stats = jobs.get_queue_stats()
    assert (stats.total_jobs, stats.pending_jobs, stats.processing_jobs) == (2, 1, 1)
    assert stats.is_processing is True

    rewrite.gate.set()
    await asyncio.wait_for(jobs.wait_until_idle(), 2)
    stats = jobs.get_queue_stats()
    assert (stats.completed_jobs, stats.pending_jobs, stats.is_processing) == (2, 0, False)
    await jobs.stop()


@pytest.mark.anyio
async def test_terminal_jobs_do_not_change():
    rewrite = RecordingRewriteService()
    jobs = _service(rewrite)

    job_id = jobs.submit_job("once", Style.FORMAL, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)
    before = jobs.get_job(job_id)

    stored = jobs._jobs[job_id]
    jobs._transition(stored, JobState.FAILED, error="late")
    await asyncio.sleep(0.05)

    assert jobs.get_job(job_id) == before
    await jobs.stop()


@pytest.mark.anyio
async def test_get_job_returns_a_copy_and_none_for_unknown_ids():
    rewrite = RecordingRewriteService()
    jobs = _service(rewrite)
    job_id = jobs.submit_job("copy", Style.FORMAL, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    snapshot = jobs.get_job(job_id)
    snapshot.result = "tampered"

    assert jobs.get_job(job_id).result == "[*formal*] copy"
    assert jobs.get_job("no-such-job") is None
    await jobs.stop()


@pytest.mark.anyio
async def test_single_worker_across_submissions():
    rewrite = RecordingRewriteService()
    jobs = _service(rewrite)

    jobs.submit_job("a", Style.FORMAL, Backend.LOCALMOC)
    task = jobs._worker_task
    jobs.submit_job("b", Style.FORMAL, Backend.LOCALMOC)
    jobs.ensure_worker()

    assert jobs._worker_task is task
    assert jobs.is_running
    await jobs.stop()
    assert not jobs.is_running


@pytest.mark.anyio
async def test_missing_job_in_queue_is_skipped():
    rewrite = RecordingRewriteService()
    jobs = _service(rewrite)

    jobs._queue.append("ghost")
    job_id = jobs.submit_job("real", Style.FORMAL, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    assert rewrite.seen == ["real"]
    assert jobs.get_job(job_id).status == JobState.COMPLETED
    await jobs.stop()


@pytest.mark.anyio
async def test_cleanup_removes_only_old_completed_jobs():
    now = [datetime(2024, 1, 1, 12, 0, 0)]
    rewrite = RecordingRewriteService(fail_on={"broken"})
    jobs = _service(rewrite, clock=lambda: now[0])

    done = jobs.submit_job("done", Style.FORMAL, Backend.LOCALMOC)
    broken = jobs.submit_job("broken", Style.FORMAL, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    now[0] += timedelta(hours=2)
    fresh = jobs.submit_job("fresh", Style.FORMAL, Backend.LOCALMOC)
    await asyncio.wait_for(jobs.wait_until_idle(), 2)

    now[0] += timedelta(minutes=30)
    assert jobs.cleanup_old_jobs(max_age_hours=1) == 1

    assert jobs.get_job(done) is None
    assert jobs.get_job(broken).status == JobState.FAILED
    assert jobs.get_job(fresh).status == JobState.COMPLETED
    assert jobs.cleanup_old_jobs(max_age_hours=1) == 0
    await jobs.stop()


def test_submit_without_running_loop_leaves_no_job_behind():
    jobs = JobService(RecordingRewriteService(), poll_interval=0.01)

    with pytest.raises(RuntimeError):
        jobs.submit_job("orphan", Style.FORMAL, Backend.LOCALMOC)

    stats = jobs.get_queue_stats()
    assert (stats.total_jobs, stats.pending_jobs) == (0, 0)
