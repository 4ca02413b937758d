"""
Unit Tests for DigestService

The repository is mocked so these tests cover the orchestration:
- Dedup against an overlapping digest
- Generated insights (added, capped, failures skipped)
- Batch isolation of per-user failures
- generate_weekly_digests_for_all_users outer failure handling
"""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from learnloop.enums.llm import LLMOperation
from learnloop.services.digest.service import (
    DigestService,
    generate_weekly_digests_for_all_users,
)
from learnloop.services.digest.stats import SessionRecord, week_bounds

NOW = datetime(2026, 10, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def repository() -> MagicMock:
    """Repository returning one week with 4 sessions (2 completed, 80 and 60)."""
    done = datetime(2026, 10, 14, 18, 0, tzinfo=timezone.utc)
    repo = MagicMock()
    repo.find_overlapping_digest = AsyncMock(return_value=None)
    repo.get_week_sessions = AsyncMock(
        return_value=[
            SessionRecord("Cats", 80, done, "Science"),
            SessionRecord("Dogs", 60, done, "Science"),
            SessionRecord("Birds", None, None, "History"),
            SessionRecord("Fish", None, None, None),
        ]
    )
    repo.count_week_items = AsyncMock(return_value=(20, 20))
    repo.get_completion_dates = AsyncMock(return_value=[done.date()])
    repo.get_recent_topics = AsyncMock(return_value=["Fish", "Birds", "Dogs", "Cats"])
    repo.get_popular_topics = AsyncMock(return_value=["Genetics", "Cats"])
    repo.has_path_progress = AsyncMock(return_value=True)
    repo.insert_digest = AsyncMock(return_value=True)
    repo.get_digest_user_ids = AsyncMock(return_value=[1, 2, 3])
    repo.commit = AsyncMock()
    repo.rollback = AsyncMock()
    return repo


def _service(repository, generator=None) -> DigestService:
    return DigestService(MagicMock(), generator=generator, repository=repository)


class TestComputeWeeklyDigest:
    @pytest.mark.asyncio
    async def test_creates_digest(self, repository: MagicMock) -> None:
        outcome = await _service(repository).compute_weekly_digest(
            1, *week_bounds(NOW)
        )

        assert outcome.created is True
        digest = outcome.digest
        assert digest.total_sessions == 4
        assert digest.completed_sessions == 2
        assert digest.average_score == 70
        assert digest.points_earned == 90
        assert digest.total_time_spent_minutes == 60
        assert digest.top_category == "Science"
        assert digest.top_performing_topic == "Cats"
        assert digest.recommendations[0] == "Genetics"
        assert len(digest.recommendations) == 5
        repository.insert_digest.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_skips_when_overlapping_digest_exists(
        self, repository: MagicMock
    ) -> None:
        existing = MagicMock()
        repository.find_overlapping_digest.return_value = existing

        outcome = await _service(repository).compute_weekly_digest(
            1, *week_bounds(NOW)
        )

        assert outcome.created is False
        assert outcome.digest is existing
        repository.get_week_sessions.assert_not_awaited()
        repository.insert_digest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_insert_race_is_not_created(self, repository: MagicMock) -> None:
        repository.insert_digest.return_value = False

        outcome = await _service(repository).compute_weekly_digest(
            1, *week_bounds(NOW)
        )

        assert outcome.created is False
        assert outcome.reason == "exists"

    @pytest.mark.asyncio
    async def test_generated_insights_appended(
        self, repository: MagicMock, fake_generator
    ) -> None:
        generated = [
            {"type": "learning_pattern", "title": f"Insight {i}", "description": "d"}
            for i in range(3)
        ]
        generator = fake_generator(
            {LLMOperation.DIGEST_INSIGHTS: json.dumps({"insights": generated})}
        )

        outcome = await _service(repository, generator).compute_weekly_digest(
            1, *week_bounds(NOW)
        )

        types = [i["type"] for i in outcome.digest.insights]
        assert types[:2] == ["activity", "performance"]
        assert types.count("learning_pattern") == 2

    @pytest.mark.asyncio
    async def test_generator_failure_keeps_baseline(
        self, repository: MagicMock, fake_generator
    ) -> None:
        generator = fake_generator({LLMOperation.DIGEST_INSIGHTS: RuntimeError("quota")})

        outcome = await _service(repository, generator).compute_weekly_digest(
            1, *week_bounds(NOW)
        )

        assert outcome.created is True
        assert all(
            i["type"] in {"activity", "performance", "streak", "timeSpent"}
            for i in outcome.digest.insights
        )

    @pytest.mark.asyncio
    async def test_no_generator_call_for_empty_week(
        self, repository: MagicMock, fake_generator
    ) -> None:
        repository.get_week_sessions.return_value = []
        repository.count_week_items.return_value = (0, 0)
        generator = fake_generator()

        outcome = await _service(repository, generator).compute_weekly_digest(
            1, *week_bounds(NOW)
        )

        assert generator.calls == []
        assert outcome.digest.total_sessions == 0
        assert outcome.digest.points_earned == 0


class TestWeeklyBatch:
    @pytest.mark.asyncio
    async def test_second_run_creates_nothing(self, repository: MagicMock) -> None:
        service = _service(repository)

        first = await service.run_weekly_batch(NOW)
        repository.find_overlapping_digest.return_value = MagicMock()
        second = await service.run_weekly_batch(NOW)

        assert first.digests_created == 3
        assert second.digests_created == 0
        assert second.skipped == 3
        assert repository.insert_digest.await_count == 3

    @pytest.mark.asyncio
    async def test_user_failure_is_isolated(self, repository: MagicMock) -> None:
        async def sessions_for(user_id, start, end):
            if user_id == 2:
                raise RuntimeError("boom")
            return []

        repository.get_week_sessions.side_effect = sessions_for
        repository.count_week_items.return_value = (0, 0)

        result = await _service(repository).run_weekly_batch(NOW)

        assert result.success is True
        assert result.users_processed == 3
        assert result.digests_created == 2
        assert result.failed == 1
        repository.rollback.assert_awaited_once()
        assert repository.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_batch_uses_current_week(self, repository: MagicMock) -> None:
        repository.get_digest_user_ids.return_value = [7]

        await _service(repository).run_weekly_batch(NOW)

        _, start, end = repository.find_overlapping_digest.await_args.args
        assert (start, end) == week_bounds(NOW)


class TestGenerateForAllUsers:
    @pytest.mark.asyncio
    async def test_outer_failure_reports_unsuccessful(self) -> None:
        with patch(
            "learnloop.services.digest.service.async_session_maker",
            side_effect=RuntimeError("database unavailable"),
        ):
            result = await generate_weekly_digests_for_all_users(now=NOW)

        assert result.success is False
        assert result.users_processed == 0
        assert "database unavailable" in result.message
