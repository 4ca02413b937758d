"""
Unit Tests for the Digest Scheduler

Each test swaps in a fresh AsyncIOScheduler so the module-level instance
is never started.
"""

from datetime import timezone
from unittest.mock import AsyncMock, patch

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from learnloop.models.digest import BatchResult
from learnloop.services import scheduler as scheduler_module
from learnloop.services.scheduler import (
    WEEKLY_DIGEST_JOB_ID,
    get_scheduled_jobs,
    run_weekly_digests,
    setup_scheduled_jobs,
    start_scheduler,
    stop_scheduler,
    trigger_job_now,
)


@pytest.fixture
def fresh_scheduler():
    instance = AsyncIOScheduler(timezone=timezone.utc)
    with patch.object(scheduler_module, "scheduler", instance):
        yield instance


class TestJobSetup:
    def test_weekly_digest_job(self, fresh_scheduler: AsyncIOScheduler) -> None:
        setup_scheduled_jobs()

        jobs = fresh_scheduler.get_jobs()
        assert [job.id for job in jobs] == [WEEKLY_DIGEST_JOB_ID]
        trigger = str(jobs[0].trigger)
        assert "day_of_week='sun'" in trigger
        assert "hour='23'" in trigger
        assert "minute='0'" in trigger

    def test_trigger_unknown_job(self, fresh_scheduler: AsyncIOScheduler) -> None:
        assert trigger_job_now("nope") is False

    def test_trigger_known_job(self, fresh_scheduler: AsyncIOScheduler) -> None:
        setup_scheduled_jobs()

        assert trigger_job_now(WEEKLY_DIGEST_JOB_ID) is True


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, fresh_scheduler: AsyncIOScheduler) -> None:
        start_scheduler()
        try:
            assert fresh_scheduler.running
            jobs = get_scheduled_jobs()
            assert jobs[0]["id"] == WEEKLY_DIGEST_JOB_ID
            assert jobs[0]["name"] == "Weekly Learning Digests"
            assert jobs[0]["next_run"] is not None

            # Second start is a no-op
            start_scheduler()
            assert len(fresh_scheduler.get_jobs()) == 1
        finally:
            stop_scheduler()

        assert not fresh_scheduler.running

    def test_stop_when_not_running(self, fresh_scheduler: AsyncIOScheduler) -> None:
        stop_scheduler()

        assert not fresh_scheduler.running


class TestWeeklyDigestJob:
    @pytest.mark.asyncio
    async def test_runs_batch_without_generator(self) -> None:
        result = BatchResult(
            success=True,
            users_processed=2,
            digests_created=2,
            skipped=0,
            failed=0,
            message="ok",
        )
        with patch(
            "learnloop.services.digest.service.generate_weekly_digests_for_all_users",
            AsyncMock(return_value=result),
        ) as batch:
            await run_weekly_digests()

        batch.assert_awaited_once_with(generator=None)
