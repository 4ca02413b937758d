"""
Redis Connection and Login Sessions

Provides Redis connection pooling and the server-side store backing the
login cookie.

Usage:
    from learnloop.db.redis import get_redis, session_store

    # Sign a user in
    session_id = await session_store.create_session(user.id, user.username)
    response.set_cookie(settings.SESSION_COOKIE_NAME, session_id, httponly=True)

    # Resolve the cookie on later requests
    data = await session_store.get_session(session_id)
"""

import json
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as redis

from learnloop.config import settings, yaml_config


# Get Redis configuration from yaml config
redis_config: dict[str, Any] = yaml_config.get("redis", {})
MAX_CONNECTIONS: int = redis_config.get("max_connections", 10)


# Connection pool (lazily initialized)
_redis_pool: Optional[redis.ConnectionPool] = None


async def get_redis_pool() -> redis.ConnectionPool:
    """Get or create the Redis connection pool."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            max_connections=MAX_CONNECTIONS,
        )
    return _redis_pool


async def get_redis() -> redis.Redis:
    """Get a Redis connection from the pool."""
    pool = await get_redis_pool()
    return redis.Redis(connection_pool=pool)


async def close_redis_pool() -> None:
    """Close the Redis connection pool."""
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None


class SessionStore:
    """
    Redis-based storage for login sessions.

    The session id is an opaque random token carried in an HttpOnly
    cookie. The stored payload identifies the user:

        {"user_id": 42, "username": "ada", "login_time": "2024-01-15T10:30:00+00:00"}

    Session Lifecycle:
        1. Login / register → create_session() stores the payload
        2. Authenticated request → get_session() reads it and slides the TTL
        3. Logout → delete_session() removes it
        4. Inactivity → Redis expires the key after the TTL
    """

    def __init__(self, prefix: str = "session", ttl: Optional[int] = None) -> None:
        """
        Args:
            prefix: Redis key prefix. Keys are stored as "{prefix}:{session_id}".
            ttl: Session lifetime in seconds. Defaults to SESSION_TTL_SECONDS.
        """
        self.prefix = prefix
        self.ttl = ttl or settings.SESSION_TTL_SECONDS

    def _make_key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    async def create_session(self, user_id: int, username: str) -> str:
        """Store a new login session and return its id."""
        session_id = secrets.token_urlsafe(32)
        data = {
            "user_id": user_id,
            "username": username,
            "login_time": datetime.now(timezone.utc).isoformat(),
        }
        r = await get_redis()
        await r.setex(self._make_key(session_id), self.ttl, json.dumps(data))
        return session_id

    async def get_session(self, session_id: str) -> Optional[dict[str, Any]]:
        """
        Retrieve session data and refresh its expiration (sliding window).

        Returns:
            Session data dictionary if found, None if expired or unknown.
        """
        r = await get_redis()
        key = self._make_key(session_id)
        data = await r.get(key)
        if data:
            await r.expire(key, self.ttl)
            return json.loads(data)
        return None

    async def delete_session(self, session_id: str) -> None:
        """Invalidate a session immediately (logout)."""
        r = await get_redis()
        await r.delete(self._make_key(session_id))


session_store = SessionStore()
