"""
SQLAlchemy Database Models

These models define the PostgreSQL schema for accounts and the topic
catalog that recommendations draw from.

Tables:
- users: Registered learners
- user_preferences: Per-user settings (weekly digest opt-in, theme)
- categories: Topic categories
- topics: Catalog topics with a popularity counter
- learning_paths: Structured paths through a category
- path_progress: A user's progress along a learning path

Learning sessions and digests live in models_learning.py.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnloop.db.base import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# ===========================================
# Accounts
# ===========================================


class User(Base):
    """
    Registered learner.

    Attributes:
        id: Primary key.
        username: Unique login name.
        password_hash: Salted password hash (Argon2 via pwdlib). Never
            returned by the API.
        display_name: Optional name shown in the UI.
        email: Optional contact address.
        joined_at: Registration timestamp.
        last_login_at: Timestamp of the most recent successful login.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    # Profile
    display_name: Mapped[Optional[str]] = mapped_column(String(200))
    email: Mapped[Optional[str]] = mapped_column(String(320))

    # Timestamps
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Relationships
    preferences: Mapped[Optional["UserPreferences"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )


class UserPreferences(Base):
    """User-level settings. One row per user."""

    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    weekly_digest_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    theme: Mapped[str] = mapped_column(String(20), default="light")

    user: Mapped["User"] = relationship(back_populates="preferences")


# ===========================================
# Topic Catalog
# ===========================================


class Category(Base):
    """
    Topic category (e.g. "Programming", "History").

    Sessions optionally link to a category; the weekly digest picks the
    user's most frequent category and recommends popular topics from it.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)

    topics: Mapped[List["Topic"]] = relationship(
        back_populates="category", cascade="all, delete-orphan"
    )


class Topic(Base):
    """Catalog topic. Popularity ranks recommendation candidates."""

    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    popularity: Mapped[int] = mapped_column(Integer, default=0)

    category: Mapped["Category"] = relationship(back_populates="topics")


class LearningPath(Base):
    """Structured sequence of topics within a category."""

    __tablename__ = "learning_paths"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL")
    )
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text)


class PathProgress(Base):
    """
    A user's position along a learning path.

    Attributes:
        id: Primary key.
        user_id: Learner.
        path_id: Path being followed.
        current_step: Zero-based index of the current step.
        started_at: When the user started the path.
        completed_at: Null while the path is in progress.
    """

    __tablename__ = "path_progress"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    path_id: Mapped[int] = mapped_column(
        ForeignKey("learning_paths.id", ondelete="CASCADE")
    )
    current_step: Mapped[int] = mapped_column(Integer, default=0)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
