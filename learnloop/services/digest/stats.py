"""
Weekly Learning Statistics

Pure functions that turn a week's session rows into the numbers a digest
reports. No database access happens here; DigestRepository supplies the
inputs.

Formulas:
- time_spent_minutes = flashcards * 1 + questions * 2 (per-item heuristic,
  not measured time)
- points_earned = floor(completed * 10 + average_score), with a missing
  average treated as 0
- improvement_areas is set when the average score is below 70
"""

import math
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Sequence

MINUTES_PER_FLASHCARD = 1
MINUTES_PER_MCQ = 2
POINTS_PER_COMPLETED_SESSION = 10
IMPROVEMENT_THRESHOLD = 70

IMPROVEMENT_AREAS_TEXT = (
    "Focus on reviewing flashcards more thoroughly before taking quizzes"
)


@dataclass
class SessionRecord:
    """The fields of a learning session the digest needs."""

    topic: str
    score: Optional[int]
    completed_at: Optional[datetime]
    category_name: Optional[str] = None


@dataclass
class LearningStats:
    """Aggregates for one user over one week."""

    total_sessions: int = 0
    completed_sessions: int = 0
    average_score: Optional[float] = None
    top_category: Optional[str] = None
    top_performing_topic: Optional[str] = None
    improvement_areas: Optional[str] = None
    streak: int = 0
    points_earned: int = 0
    time_spent_minutes: int = 0


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """
    Monday 00:00:00 through Sunday 23:59:59.999999 (UTC) of the week
    containing now. Naive datetimes are taken as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    monday = now.date() - timedelta(days=now.weekday())
    start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
    end = datetime.combine(monday + timedelta(days=6), time.max, tzinfo=timezone.utc)
    return start, end


def calculate_streak(completion_dates: Sequence[date], reference_day: date) -> int:
    """
    Count consecutive days with a completed session.

    The streak ends on reference_day, or on the day before if nothing was
    completed on reference_day yet. Duplicate dates are ignored.

    Args:
        completion_dates: Days on which the user completed a session, any order.
        reference_day: Last day of the window being summarized.
    """
    days = sorted({d for d in completion_dates if d <= reference_day}, reverse=True)
    if not days:
        return 0

    most_recent = days[0]
    if most_recent not in (reference_day, reference_day - timedelta(days=1)):
        return 0

    streak = 0
    expected = most_recent
    for day in days:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def _top_category(sessions: Sequence[SessionRecord]) -> Optional[str]:
    # Most sessions wins; ties go to the lexicographically first name
    counts = Counter(s.category_name for s in sessions if s.category_name)
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def _top_performing_topic(sessions: Sequence[SessionRecord]) -> Optional[str]:
    scores: dict[str, list[int]] = defaultdict(list)
    for s in sessions:
        if s.score is not None:
            scores[s.topic].append(s.score)
    if not scores:
        return None
    averages = {topic: sum(v) / len(v) for topic, v in scores.items()}
    return min(averages.items(), key=lambda item: (-item[1], item[0]))[0]


def summarize_sessions(
    sessions: Sequence[SessionRecord],
    flashcard_count: int = 0,
    mcq_count: int = 0,
    streak: int = 0,
) -> LearningStats:
    """
    Aggregate a week's sessions.

    Args:
        sessions: Sessions created within the week
        flashcard_count: Flashcards belonging to those sessions
        mcq_count: Questions belonging to those sessions
        streak: Precomputed streak (see calculate_streak)
    """
    total = len(sessions)
    completed = sum(1 for s in sessions if s.completed_at is not None)
    scores = [s.score for s in sessions if s.score is not None]
    average = sum(scores) / len(scores) if scores else None

    improvement_areas = None
    if average is not None and average < IMPROVEMENT_THRESHOLD:
        improvement_areas = IMPROVEMENT_AREAS_TEXT

    return LearningStats(
        total_sessions=total,
        completed_sessions=completed,
        average_score=average,
        top_category=_top_category(sessions),
        top_performing_topic=_top_performing_topic(sessions),
        improvement_areas=improvement_areas,
        streak=streak,
        points_earned=math.floor(
            completed * POINTS_PER_COMPLETED_SESSION + (average or 0)
        ),
        time_spent_minutes=flashcard_count * MINUTES_PER_FLASHCARD
        + mcq_count * MINUTES_PER_MCQ,
    )
