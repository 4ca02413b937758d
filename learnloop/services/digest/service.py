"""
Weekly Digest Service

Computes one learning digest per user per Monday-Sunday week.

Algorithm (compute_weekly_digest):
1. Skip when a digest of the user already overlaps the window
2. Aggregate the week's sessions: counts, average score, top category,
   top-performing topic, estimated minutes, points
3. Streak of consecutive completion days ending on the window's last day
   (or today, if the window hasn't ended yet)
4. Baseline insights, plus up to two generated insights when a generator
   is available and the user had sessions; generator failures are logged
   and skipped
5. Recommendations from the top category's popular topics and fixed advice
6. Insert; a concurrent insert of the same week counts as a skip

Batch (run_weekly_batch):
    Iterates opted-in users sequentially. Each user is committed on its
    own; an exception for one user is logged, rolled back and counted,
    and processing continues with the next user.

Usage:
    service = DigestService(db, generator=get_text_generator())
    digest = await service.compute_weekly_digest(user.id, *week_bounds(now))
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.config import settings
from learnloop.db.base import async_session_maker
from learnloop.db.models_learning import LearningDigest
from learnloop.enums.llm import LLMOperation
from learnloop.models.digest import BatchResult
from learnloop.services.digest.insights import (
    build_baseline_insights,
    build_insights_prompt,
    parse_generated_insights,
)
from learnloop.services.digest.recommendations import build_recommendations
from learnloop.services.digest.repository import DigestRepository
from learnloop.services.digest.stats import (
    LearningStats,
    calculate_streak,
    summarize_sessions,
    week_bounds,
)
from learnloop.services.llm.client import TextGenerator

logger = logging.getLogger(__name__)

INSIGHT_CONTEXT_TOPICS = 5
RECOMMENDATION_HISTORY_TOPICS = 10


@dataclass
class DigestOutcome:
    """Result of computing one user's digest."""

    digest: Optional[LearningDigest]
    created: bool
    reason: str = ""


class DigestService:
    """Computes, stores and reads weekly learning digests."""

    def __init__(
        self,
        db: AsyncSession,
        generator: Optional[TextGenerator] = None,
        repository: Optional[DigestRepository] = None,
    ):
        """
        Args:
            db: Async database session
            generator: Text generator for extra insights. None disables them.
            repository: Query layer (defaults to DigestRepository(db))
        """
        self.db = db
        self.generator = generator
        self.repository = repository or DigestRepository(db)

    # ===========================================
    # Computation
    # ===========================================

    async def get_user_learning_stats(
        self, user_id: int, week_start: datetime, week_end: datetime
    ) -> LearningStats:
        sessions = await self.repository.get_week_sessions(user_id, week_start, week_end)
        flashcard_count, mcq_count = await self.repository.count_week_items(
            user_id, week_start, week_end
        )

        now = datetime.now(timezone.utc)
        until = min(week_end, now)
        completion_dates = await self.repository.get_completion_dates(user_id, until)
        streak = calculate_streak(completion_dates, until.astimezone(timezone.utc).date())

        return summarize_sessions(
            sessions,
            flashcard_count=flashcard_count,
            mcq_count=mcq_count,
            streak=streak,
        )

    async def _generate_insights(self, user_id: int, stats: LearningStats) -> list[dict]:
        if self.generator is None or stats.total_sessions == 0:
            return []
        try:
            recent_topics = await self.repository.get_recent_topics(
                user_id, INSIGHT_CONTEXT_TOPICS
            )
            text = await self.generator.generate(
                build_insights_prompt(stats, recent_topics),
                operation=LLMOperation.DIGEST_INSIGHTS,
            )
        except Exception as e:
            logger.warning(f"Insight generation failed for user {user_id}: {e}")
            return []
        return parse_generated_insights(text, limit=settings.DIGEST_MAX_AI_INSIGHTS)

    async def _build_recommendations(
        self, user_id: int, stats: LearningStats
    ) -> list[str]:
        recent_topics = await self.repository.get_recent_topics(
            user_id, RECOMMENDATION_HISTORY_TOPICS
        )
        category_topics: list[str] = []
        if stats.top_category:
            category_topics = await self.repository.get_popular_topics(
                stats.top_category
            )
        has_path_progress = await self.repository.has_path_progress(user_id)

        return build_recommendations(
            stats,
            recent_topics=recent_topics,
            category_topics=category_topics,
            has_path_progress=has_path_progress,
            target=settings.DIGEST_RECOMMENDATION_TARGET,
        )

    async def compute_weekly_digest(
        self, user_id: int, week_start: datetime, week_end: datetime
    ) -> DigestOutcome:
        """
        Compute and store the digest for one user and week.

        Returns:
            DigestOutcome with created=False and the existing row when a
            digest overlapping the window already exists.
        """
        existing = await self.repository.find_overlapping_digest(
            user_id, week_start, week_end
        )
        if existing is not None:
            logger.info(f"Digest already exists for user {user_id} for this week")
            return DigestOutcome(digest=existing, created=False, reason="exists")

        stats = await self.get_user_learning_stats(user_id, week_start, week_end)
        insights = build_baseline_insights(stats)
        insights.extend(await self._generate_insights(user_id, stats))
        recommendations = await self._build_recommendations(user_id, stats)

        digest = LearningDigest(
            user_id=user_id,
            week_start_date=week_start,
            week_end_date=week_end,
            total_sessions=stats.total_sessions,
            completed_sessions=stats.completed_sessions,
            average_score=stats.average_score,
            total_time_spent_minutes=stats.time_spent_minutes,
            top_category=stats.top_category,
            top_performing_topic=stats.top_performing_topic,
            improvement_areas=stats.improvement_areas,
            streak=stats.streak,
            points_earned=stats.points_earned,
            insights=insights,
            recommendations=recommendations,
            created_at=datetime.now(timezone.utc),
        )
        if not await self.repository.insert_digest(digest):
            return DigestOutcome(digest=None, created=False, reason="exists")

        logger.info(f"Created weekly digest for user {user_id}")
        return DigestOutcome(digest=digest, created=True)

    async def generate_current_week(
        self, user_id: int, now: Optional[datetime] = None
    ) -> DigestOutcome:
        """On-demand digest for the week containing now."""
        week_start, week_end = week_bounds(now or datetime.now(timezone.utc))
        return await self.compute_weekly_digest(user_id, week_start, week_end)

    async def run_weekly_batch(self, now: Optional[datetime] = None) -> BatchResult:
        """Compute the current week's digest for every opted-in user."""
        week_start, week_end = week_bounds(now or datetime.now(timezone.utc))
        user_ids = await self.repository.get_digest_user_ids()
        logger.info(
            f"Generating weekly digests for {len(user_ids)} users "
            f"({week_start.date()} - {week_end.date()})"
        )

        created = skipped = failed = 0
        for user_id in user_ids:
            try:
                outcome = await self.compute_weekly_digest(user_id, week_start, week_end)
                await self.repository.commit()
            except Exception as e:
                logger.error(f"Error generating digest for user {user_id}: {e}")
                await self.repository.rollback()
                failed += 1
                continue
            if outcome.created:
                created += 1
            else:
                skipped += 1

        return BatchResult(
            success=True,
            users_processed=len(user_ids),
            digests_created=created,
            skipped=skipped,
            failed=failed,
            message=(
                f"Generated digests for {len(user_ids)} users: {created} created, "
                f"{skipped} skipped, {failed} failed"
            ),
        )

    # ===========================================
    # Reads
    # ===========================================

    async def get_latest_digest(self, user_id: int) -> Optional[LearningDigest]:
        return await self.repository.get_latest_digest(user_id)

    async def get_digest_for_week(
        self, user_id: int, week_start: datetime
    ) -> Optional[LearningDigest]:
        return await self.repository.get_digest_for_week(user_id, week_start)

    async def list_digests(self, user_id: int) -> list[LearningDigest]:
        return await self.repository.list_digests(user_id)

    async def get_digest(self, digest_id: int) -> Optional[LearningDigest]:
        return await self.repository.get_digest(digest_id)

    async def mark_opened(self, digest: LearningDigest) -> None:
        await self.repository.mark_opened(digest)


async def generate_weekly_digests_for_all_users(
    now: Optional[datetime] = None,
    generator: Optional[TextGenerator] = None,
) -> BatchResult:
    """
    Run the weekly batch in a fresh database session.

    Entry point for the scheduler and the CLI script. Failures outside the
    per-user loop (e.g. the user query itself) are logged and reported
    with success=False.
    """
    try:
        async with async_session_maker() as db:
            service = DigestService(db, generator=generator)
            return await service.run_weekly_batch(now)
    except Exception as e:
        logger.error(f"Error generating weekly digests: {e}")
        return BatchResult(
            success=False,
            users_processed=0,
            digests_created=0,
            skipped=0,
            failed=0,
            message=str(e),
        )
