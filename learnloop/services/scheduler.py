"""
Scheduled Job Configuration

Configures periodic jobs using APScheduler:
- Weekly learning digests (default Sunday 23:00 UTC)

Execution Context:
    The scheduler runs IN-PROCESS with FastAPI and shares its event loop.
    It is started/stopped via FastAPI's lifespan context manager in
    learnloop/main.py. Jobs run the digest batch directly.

Limitations:
    - Single instance only: each replica runs its own scheduler. Duplicate
      digests are still prevented by the overlap check and the
      (user_id, week_start_date) unique constraint.

Usage:
    # Automatic (via FastAPI lifespan in main.py):
    start_scheduler()  # On app startup
    stop_scheduler()   # On app shutdown

    # Manual trigger:
    from learnloop.services.scheduler import trigger_job_now
    trigger_job_now(WEEKLY_DIGEST_JOB_ID)
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from learnloop.config import settings

logger = logging.getLogger(__name__)

WEEKLY_DIGEST_JOB_ID = "weekly_digests"

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone=timezone.utc)


async def run_weekly_digests() -> None:
    """Generate this week's digests for all opted-in users."""
    # Deferred imports: avoid loading DB and LLM modules until job execution
    from learnloop.services.digest.service import generate_weekly_digests_for_all_users
    from learnloop.services.llm.client import get_text_generator

    result = await generate_weekly_digests_for_all_users(
        generator=get_text_generator()
    )
    logger.info(f"Weekly digest job finished: {result.message}")


def setup_scheduled_jobs() -> None:
    """Configure all scheduled jobs."""
    scheduler.add_job(
        run_weekly_digests,
        CronTrigger(
            day_of_week=settings.DIGEST_CRON_DAY_OF_WEEK,
            hour=settings.DIGEST_CRON_HOUR,
            minute=0,
            timezone=timezone.utc,
        ),
        id=WEEKLY_DIGEST_JOB_ID,
        name="Weekly Learning Digests",
        replace_existing=True,
        misfire_grace_time=3600,  # Allow 1 hour grace period
    )

    logger.info(
        f"Scheduled jobs configured: weekly digests on "
        f"{settings.DIGEST_CRON_DAY_OF_WEEK} at {settings.DIGEST_CRON_HOUR:02d}:00 UTC"
    )


def start_scheduler() -> None:
    """Start the scheduler and configure jobs."""
    if scheduler.running:
        logger.warning("Scheduler already running")
        return

    setup_scheduled_jobs()
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler() -> None:
    """Stop the scheduler gracefully."""
    if not scheduler.running:
        logger.warning("Scheduler not running")
        return

    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")


def get_scheduled_jobs() -> list[dict]:
    """Get list of scheduled jobs with their next run times."""
    jobs = []
    for job in scheduler.get_jobs():
        next_run = getattr(job, "next_run_time", None)
        jobs.append(
            {
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
                "trigger": str(job.trigger),
            }
        )
    return jobs


def trigger_job_now(job_id: str) -> bool:
    """
    Manually trigger a scheduled job immediately.

    Returns:
        True if the job exists and was rescheduled to run now
    """
    job = scheduler.get_job(job_id)
    if job:
        job.modify(next_run_time=datetime.now(timezone.utc))
        logger.info(f"Manually triggered job: {job_id}")
        return True

    logger.warning(f"Job not found: {job_id}")
    return False
