"""
Unit Tests for Weekly Digest Statistics

Tests for:
- Week bounds (Monday 00:00 through Sunday 23:59:59.999999 UTC)
- Streak calculation
- Session aggregation: averages, points, time estimate, top category/topic
"""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from learnloop.services.digest.stats import (
    IMPROVEMENT_AREAS_TEXT,
    SessionRecord,
    calculate_streak,
    summarize_sessions,
    week_bounds,
)

DONE = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)


def _session(topic="Cats", score=None, completed=False, category=None) -> SessionRecord:
    return SessionRecord(
        topic=topic,
        score=score,
        completed_at=DONE if completed else None,
        category_name=category,
    )


# =============================================================================
# Week Bounds
# =============================================================================


class TestWeekBounds:
    def test_midweek(self) -> None:
        start, end = week_bounds(datetime(2026, 10, 15, 9, 30, tzinfo=timezone.utc))

        assert start == datetime(2026, 10, 12, tzinfo=timezone.utc)
        assert end == datetime.combine(date(2026, 10, 18), time.max, tzinfo=timezone.utc)
        assert start.weekday() == 0

    def test_sunday_night_stays_in_week(self) -> None:
        start, _ = week_bounds(datetime(2026, 10, 18, 23, 0, tzinfo=timezone.utc))

        assert start.date() == date(2026, 10, 12)

    def test_monday_midnight_starts_new_week(self) -> None:
        start, _ = week_bounds(datetime(2026, 10, 19, 0, 0, tzinfo=timezone.utc))

        assert start.date() == date(2026, 10, 19)

    def test_naive_datetime_is_utc(self) -> None:
        start, _ = week_bounds(datetime(2026, 10, 15, 9, 30))

        assert start.tzinfo == timezone.utc


# =============================================================================
# Streak
# =============================================================================


class TestStreak:
    @pytest.fixture
    def today(self) -> date:
        return date(2026, 10, 18)

    def test_consecutive_days_ending_today(self, today: date) -> None:
        dates = [today - timedelta(days=i) for i in range(4)]

        assert calculate_streak(dates, today) == 4

    def test_streak_can_end_yesterday(self, today: date) -> None:
        dates = [today - timedelta(days=i) for i in range(1, 4)]

        assert calculate_streak(dates, today) == 3

    def test_broken_streak(self, today: date) -> None:
        dates = [today, today - timedelta(days=1), today - timedelta(days=3)]

        assert calculate_streak(dates, today) == 2

    def test_stale_activity_is_no_streak(self, today: date) -> None:
        assert calculate_streak([today - timedelta(days=2)], today) == 0

    def test_duplicates_and_future_dates_ignored(self, today: date) -> None:
        dates = [today, today, today + timedelta(days=1), today - timedelta(days=1)]

        assert calculate_streak(dates, today) == 2

    def test_empty(self, today: date) -> None:
        assert calculate_streak([], today) == 0


# =============================================================================
# Aggregation
# =============================================================================


class TestSummarizeSessions:
    def test_four_sessions_two_completed(self) -> None:
        """Scores 80 and 60 average to 70; points are 2*10 + 70."""
        sessions = [
            _session("Cats", 80, completed=True),
            _session("Dogs", 60, completed=True),
            _session("Birds"),
            _session("Fish"),
        ]

        stats = summarize_sessions(sessions)

        assert stats.total_sessions == 4
        assert stats.completed_sessions == 2
        assert stats.average_score == 70
        assert stats.points_earned == 90
        assert stats.improvement_areas is None

    def test_points_floor(self) -> None:
        sessions = [
            _session("A", 67, completed=True),
            _session("B", 66, completed=True),
            _session("C", 66, completed=True),
        ]

        stats = summarize_sessions(sessions)

        # 3*10 + 66.33...
        assert stats.points_earned == 96

    def test_no_scores(self) -> None:
        stats = summarize_sessions([_session(), _session()])

        assert stats.average_score is None
        assert stats.points_earned == 0
        assert stats.top_performing_topic is None

    def test_empty_week(self) -> None:
        stats = summarize_sessions([])

        assert stats.total_sessions == 0
        assert stats.average_score is None
        assert stats.top_category is None

    @pytest.mark.parametrize(
        "flashcards,mcqs,minutes", [(0, 0, 0), (10, 5, 20), (7, 10, 27)]
    )
    def test_time_estimate(self, flashcards: int, mcqs: int, minutes: int) -> None:
        stats = summarize_sessions(
            [_session()], flashcard_count=flashcards, mcq_count=mcqs
        )

        assert stats.time_spent_minutes == minutes

    def test_improvement_areas_below_seventy(self) -> None:
        stats = summarize_sessions([_session(score=69, completed=True)])

        assert stats.improvement_areas == IMPROVEMENT_AREAS_TEXT

    def test_top_category_by_count(self) -> None:
        sessions = [
            _session(category="Science"),
            _session(category="History"),
            _session(category="Science"),
            _session(category=None),
        ]

        assert summarize_sessions(sessions).top_category == "Science"

    def test_top_category_tie_is_lexicographic(self) -> None:
        sessions = [
            _session(category="Science"),
            _session(category="History"),
        ]

        assert summarize_sessions(sessions).top_category == "History"

    def test_top_performing_topic_by_average(self) -> None:
        sessions = [
            _session("Cats", 100, completed=True),
            _session("Cats", 40, completed=True),
            _session("Dogs", 80, completed=True),
        ]

        assert summarize_sessions(sessions).top_performing_topic == "Dogs"

    def test_top_performing_topic_tie_is_lexicographic(self) -> None:
        sessions = [
            _session("Zebras", 90, completed=True),
            _session("Ants", 90, completed=True),
        ]

        assert summarize_sessions(sessions).top_performing_topic == "Ants"

    def test_streak_passthrough(self) -> None:
        assert summarize_sessions([], streak=3).streak == 3
