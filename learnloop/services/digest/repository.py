"""
Digest Repository

All database access for weekly digests: the week's sessions and item
counts, streak inputs, the topic catalog, and digest rows themselves.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.db.models import Category, PathProgress, Topic, User, UserPreferences
from learnloop.db.models_learning import (
    Flashcard,
    LearningDigest,
    LearningSession,
    MCQuestion,
)
from learnloop.services.digest.stats import SessionRecord

logger = logging.getLogger(__name__)


class DigestRepository:
    """Queries backing DigestService."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _week_filter(self, user_id: int, start: datetime, end: datetime):
        return and_(
            LearningSession.user_id == user_id,
            LearningSession.created_at >= start,
            LearningSession.created_at <= end,
        )

    # ===========================================
    # Session statistics
    # ===========================================

    async def get_week_sessions(
        self, user_id: int, start: datetime, end: datetime
    ) -> list[SessionRecord]:
        """Sessions created in [start, end] with their category names."""
        result = await self.db.execute(
            select(
                LearningSession.topic,
                LearningSession.score,
                LearningSession.completed_at,
                Category.name,
            )
            .outerjoin(Category, LearningSession.category_id == Category.id)
            .where(self._week_filter(user_id, start, end))
        )
        return [
            SessionRecord(
                topic=row[0], score=row[1], completed_at=row[2], category_name=row[3]
            )
            for row in result.all()
        ]

    async def count_week_items(
        self, user_id: int, start: datetime, end: datetime
    ) -> tuple[int, int]:
        """(flashcards, questions) belonging to sessions created in [start, end]."""
        flashcards = await self.db.scalar(
            select(func.count(Flashcard.id))
            .join(LearningSession, Flashcard.session_id == LearningSession.id)
            .where(self._week_filter(user_id, start, end))
        )
        mcqs = await self.db.scalar(
            select(func.count(MCQuestion.id))
            .join(LearningSession, MCQuestion.session_id == LearningSession.id)
            .where(self._week_filter(user_id, start, end))
        )
        return flashcards or 0, mcqs or 0

    async def get_completion_dates(self, user_id: int, until: datetime) -> list[date]:
        """UTC calendar days on which the user completed a session, up to until."""
        result = await self.db.execute(
            select(LearningSession.completed_at).where(
                LearningSession.user_id == user_id,
                LearningSession.completed_at.is_not(None),
                LearningSession.completed_at <= until,
            )
        )
        return sorted(
            {ts.astimezone(timezone.utc).date() for ts in result.scalars().all()},
            reverse=True,
        )

    async def get_recent_topics(self, user_id: int, limit: int) -> list[str]:
        """Topics of the user's most recent sessions, newest first."""
        result = await self.db.execute(
            select(LearningSession.topic)
            .where(LearningSession.user_id == user_id)
            .order_by(LearningSession.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_popular_topics(self, category_name: str) -> list[str]:
        """Topics of a category with popularity > 0, most popular first."""
        result = await self.db.execute(
            select(Topic.name)
            .join(Category, Topic.category_id == Category.id)
            .where(Category.name == category_name, Topic.popularity > 0)
            .order_by(Topic.popularity.desc(), Topic.name)
        )
        return list(result.scalars().all())

    async def has_path_progress(self, user_id: int) -> bool:
        count = await self.db.scalar(
            select(func.count(PathProgress.id)).where(PathProgress.user_id == user_id)
        )
        return bool(count)

    # ===========================================
    # Users
    # ===========================================

    async def get_digest_user_ids(self) -> list[int]:
        """Users who opted in to weekly digests, in id order."""
        result = await self.db.execute(
            select(User.id)
            .join(UserPreferences, UserPreferences.user_id == User.id)
            .where(UserPreferences.weekly_digest_enabled.is_(True))
            .order_by(User.id)
        )
        return list(result.scalars().all())

    # ===========================================
    # Digests
    # ===========================================

    async def find_overlapping_digest(
        self, user_id: int, start: datetime, end: datetime
    ) -> Optional[LearningDigest]:
        """Any digest of the user whose window intersects [start, end]."""
        result = await self.db.execute(
            select(LearningDigest)
            .where(
                LearningDigest.user_id == user_id,
                LearningDigest.week_start_date <= end,
                LearningDigest.week_end_date >= start,
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert_digest(self, digest: LearningDigest) -> bool:
        """
        Insert a digest row.

        Returns:
            False when the (user, week) unique constraint rejected it because
            a concurrent run inserted the same week first.
        """
        self.db.add(digest)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.info(
                f"Digest for user {digest.user_id} week {digest.week_start_date} "
                f"already inserted by another run"
            )
            return False
        return True

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def get_latest_digest(self, user_id: int) -> Optional[LearningDigest]:
        result = await self.db.execute(
            select(LearningDigest)
            .where(LearningDigest.user_id == user_id)
            .order_by(LearningDigest.week_end_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_digest_for_week(
        self, user_id: int, week_start: datetime
    ) -> Optional[LearningDigest]:
        """Digest whose window lies within week_start .. week_start + 6 days."""
        week_end = week_start + timedelta(days=7) - timedelta(microseconds=1)
        result = await self.db.execute(
            select(LearningDigest)
            .where(
                LearningDigest.user_id == user_id,
                LearningDigest.week_start_date >= week_start,
                LearningDigest.week_end_date <= week_end,
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_digests(self, user_id: int) -> list[LearningDigest]:
        result = await self.db.execute(
            select(LearningDigest)
            .where(LearningDigest.user_id == user_id)
            .order_by(LearningDigest.week_end_date.desc())
        )
        return list(result.scalars().all())

    async def get_digest(self, digest_id: int) -> Optional[LearningDigest]:
        return await self.db.get(LearningDigest, digest_id)

    async def mark_opened(self, digest: LearningDigest) -> None:
        """Stamp opened_at the first time the digest is opened."""
        if digest.opened_at is None:
            digest.opened_at = datetime.now(timezone.utc)
            await self.db.flush()
