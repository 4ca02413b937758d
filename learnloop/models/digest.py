"""
Weekly Digest API Models (Pydantic)

ARCHITECTURE NOTE:
    There is a corresponding SQLAlchemy model: LearningDigest in
    learnloop/db/models_learning.py
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from learnloop.models.base import StrictRequest, StrictResponse


class DigestInsight(StrictResponse):
    """
    One narrative insight.

    type is one of the baseline InsightType values or a free-form type
    returned by the generator (e.g. "learning_pattern").
    """

    type: str
    title: str
    description: str
    data: Optional[dict[str, Any]] = None


class DigestResponse(StrictResponse):
    """A stored weekly digest."""

    id: int
    user_id: int
    week_start_date: datetime
    week_end_date: datetime
    total_sessions: int
    completed_sessions: int
    average_score: Optional[float] = None
    total_time_spent_minutes: int
    top_category: Optional[str] = None
    top_performing_topic: Optional[str] = None
    improvement_areas: Optional[str] = None
    streak: int
    points_earned: int
    insights: list[DigestInsight] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    created_at: datetime
    opened_at: Optional[datetime] = None


class DigestGenerateResponse(StrictResponse):
    """Outcome of an on-demand digest for the signed-in user."""

    created: bool
    message: str
    digest: Optional[DigestResponse] = None


class BatchResult(StrictResponse):
    """Outcome of a digest batch run over all opted-in users."""

    success: bool
    users_processed: int
    digests_created: int
    skipped: int
    failed: int
    message: str


# ===========================================
# Preferences
# ===========================================


class PreferencesResponse(StrictResponse):
    weekly_digest_enabled: bool
    theme: str


class PreferencesUpdate(StrictRequest):
    """Partial update; omitted fields keep their current value."""

    weekly_digest_enabled: Optional[bool] = None
    theme: Optional[str] = Field(None, pattern="^(light|dark|system)$")
