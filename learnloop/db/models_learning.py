"""
SQLAlchemy Database Models for Learning Sessions and Digests

Tables:
- learning_sessions: One row per topic submission, with score and
  save-for-later checkpoint
- flashcards: Generated flashcards for a session
- mcqs: Generated multiple-choice questions for a session
- learning_digests: Weekly per-user learning summaries

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    The corresponding Pydantic files are learnloop/models/learning.py
    and learnloop/models/digest.py.

    Data flows: Service Layer → Pydantic → SQLAlchemy → Database
"""

from datetime import datetime, timezone
from typing import List, Optional
import uuid

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnloop.db.base import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ===========================================
# Learning Sessions
# ===========================================


class LearningSession(Base):
    """
    A learner's pass through one topic: flashcards, then a timed quiz.

    Created when the topic is submitted. Mutated exactly two ways:
    completing the quiz (score and completed_at set, checkpoint cleared)
    or saving for later (checkpoint set). Never deleted.

    Attributes:
        id: UUID string primary key.
        user_id: Owner. Null for anonymous sessions.
        category_id: Optional catalog category the topic belongs to.
        topic: Free-text topic as entered (at least 2 characters).
        score: Quiz score as a percentage 0-100. Null until completed.
        created_at: Submission timestamp.
        completed_at: Null while the session is in progress.
        progress_type: Checkpoint location ("flashcards" or "mcq").
        progress_index: Zero-based index within the checkpoint location.
        progress_data: Checkpoint payload {answers, timeRemaining, topic}.
    """

    __tablename__ = "learning_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL")
    )
    topic: Mapped[str] = mapped_column(String(500))
    score: Mapped[Optional[int]] = mapped_column(Integer)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, index=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Save-for-later checkpoint
    progress_type: Mapped[Optional[str]] = mapped_column(String(20))
    progress_index: Mapped[Optional[int]] = mapped_column(Integer)
    progress_data: Mapped[Optional[dict]] = mapped_column(JSON)

    # Relationships
    flashcards: Mapped[List["Flashcard"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )
    mcqs: Mapped[List["MCQuestion"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )


class Flashcard(Base):
    """Generated flashcard. Content is an HTML fragment. Immutable."""

    __tablename__ = "flashcards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("learning_sessions.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    title: Mapped[str] = mapped_column(String(500))
    content: Mapped[str] = mapped_column(Text)

    session: Mapped["LearningSession"] = relationship(back_populates="flashcards")


class MCQuestion(Base):
    """
    Generated multiple-choice question. Immutable.

    Attributes:
        options: Exactly four answer strings, in A-D order.
        correct_answer: Letter of the correct option ("A"-"D").
    """

    __tablename__ = "mcqs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("learning_sessions.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    question: Mapped[str] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JSON)
    correct_answer: Mapped[str] = mapped_column(String(1))

    session: Mapped["LearningSession"] = relationship(back_populates="mcqs")


# ===========================================
# Weekly Digests
# ===========================================


class LearningDigest(Base):
    """
    Weekly learning summary for one user.

    At most one digest exists per user per Monday-Sunday window. The
    service checks for overlap before inserting; the unique constraint
    on (user_id, week_start_date) rejects a concurrent duplicate.

    Attributes:
        id: Primary key.
        user_id: Owner.
        week_start_date: Monday 00:00 UTC of the digest week.
        week_end_date: Sunday 23:59:59.999999 UTC of the digest week.
        total_sessions: Sessions created during the week.
        completed_sessions: Of those, sessions with a completed quiz.
        average_score: Mean score over scored sessions. Null if none.
        total_time_spent_minutes: Estimate (1 min per flashcard,
            2 min per question).
        top_category: Most frequent category name, if any.
        top_performing_topic: Topic with the highest average score.
        improvement_areas: Set when the average score is below 70.
        streak: Consecutive days with a completed session ending on the
            last day of the week.
        points_earned: completed * 10 + average score, floored.
        insights: List of {type, title, description, data?} objects.
        recommendations: List of recommendation strings.
        created_at: When the digest was computed.
        opened_at: When the user first opened the digest.
    """

    __tablename__ = "learning_digests"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "week_start_date", name="uq_learning_digests_user_week"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    week_start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    week_end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    # Stats
    total_sessions: Mapped[int] = mapped_column(Integer, default=0)
    completed_sessions: Mapped[int] = mapped_column(Integer, default=0)
    average_score: Mapped[Optional[float]] = mapped_column(Float)
    total_time_spent_minutes: Mapped[int] = mapped_column(Integer, default=0)
    top_category: Mapped[Optional[str]] = mapped_column(String(100))
    top_performing_topic: Mapped[Optional[str]] = mapped_column(String(500))
    improvement_areas: Mapped[Optional[str]] = mapped_column(Text)
    streak: Mapped[int] = mapped_column(Integer, default=0)
    points_earned: Mapped[int] = mapped_column(Integer, default=0)

    # Narrative
    insights: Mapped[list] = mapped_column(JSON, default=list)
    recommendations: Mapped[list] = mapped_column(JSON, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    opened_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
