"""
Unit Tests for the Redis Login Session Store

Redis is mocked; see the mock_redis fixture in conftest.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from learnloop.db.redis import SessionStore


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(prefix="test_session", ttl=60)


class TestSessionStore:
    @pytest.mark.asyncio
    async def test_create_session(self, store: SessionStore, mock_redis) -> None:
        with patch("learnloop.db.redis.get_redis", AsyncMock(return_value=mock_redis)):
            session_id = await store.create_session(42, "ada")

        key, ttl, payload = mock_redis.setex.await_args.args
        assert key == f"test_session:{session_id}"
        assert ttl == 60
        data = json.loads(payload)
        assert data["user_id"] == 42
        assert data["username"] == "ada"
        assert "login_time" in data

    @pytest.mark.asyncio
    async def test_session_ids_are_unique(self, store: SessionStore, mock_redis) -> None:
        with patch("learnloop.db.redis.get_redis", AsyncMock(return_value=mock_redis)):
            first = await store.create_session(1, "a")
            second = await store.create_session(1, "a")

        assert first != second
        assert len(first) >= 32

    @pytest.mark.asyncio
    async def test_get_session_slides_expiry(self, store: SessionStore, mock_redis) -> None:
        mock_redis.get.return_value = json.dumps({"user_id": 42, "username": "ada"})

        with patch("learnloop.db.redis.get_redis", AsyncMock(return_value=mock_redis)):
            data = await store.get_session("abc")

        assert data == {"user_id": 42, "username": "ada"}
        mock_redis.get.assert_awaited_once_with("test_session:abc")
        mock_redis.expire.assert_awaited_once_with("test_session:abc", 60)

    @pytest.mark.asyncio
    async def test_get_unknown_session(self, store: SessionStore, mock_redis) -> None:
        with patch("learnloop.db.redis.get_redis", AsyncMock(return_value=mock_redis)):
            assert await store.get_session("missing") is None

        mock_redis.expire.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_session(self, store: SessionStore, mock_redis) -> None:
        with patch("learnloop.db.redis.get_redis", AsyncMock(return_value=mock_redis)):
            await store.delete_session("abc")

        mock_redis.delete.assert_awaited_once_with("test_session:abc")

    def test_default_ttl_from_settings(self) -> None:
        from learnloop.config import settings

        assert SessionStore().ttl == settings.SESSION_TTL_SECONDS
