"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests.

Settings are read once at import time, so the test environment is set up
at module level, before anything from learnloop is imported.
"""

import os
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Load .env for POSTGRES_TEST_* variables, without overriding the environment
_project_root = Path(__file__).parent.parent
if (_project_root / ".env").exists():
    load_dotenv(_project_root / ".env")

# Use litellm's bundled model cost map instead of fetching it in a background
# thread, which can deadlock test collection when the network is unavailable
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")


# ============================================================================
# Environment Configuration
# ============================================================================

os.environ.update(
    {
        "POSTGRES_HOST": os.environ.get("POSTGRES_HOST", "localhost"),
        "POSTGRES_PORT": os.environ.get("POSTGRES_PORT", "5432"),
        "POSTGRES_USER": os.environ.get("POSTGRES_TEST_USER", "testuser"),
        "POSTGRES_PASSWORD": os.environ.get("POSTGRES_TEST_PASSWORD", "testpass"),
        "POSTGRES_DB": os.environ.get("POSTGRES_TEST_DB", "testdb"),
        "REDIS_URL": os.environ.get("REDIS_URL", "redis://localhost:6379/1"),
        # No provider keys: nothing in the test suite may reach a real LLM
        "OPENAI_API_KEY": "",
        "ANTHROPIC_API_KEY": "",
        "GEMINI_API_KEY": "",
        "ADMIN_API_KEY": "",
        "DEBUG": "false",
        "RATE_LIMIT_ENABLED": "false",
        "DIGEST_SCHEDULE_ENABLED": "false",
        "LLM_MAX_RETRIES": "1",
    }
)


# ============================================================================
# Fake Generator
# ============================================================================


class FakeGenerator:
    """
    Deterministic TextGenerator.

    responses maps an LLMOperation to either the text to return or an
    exception to raise. Calls are recorded for assertions.
    """

    def __init__(self, responses: Optional[dict[Any, Any]] = None):
        self.responses = responses or {}
        self.calls: list[tuple[Any, str]] = []

    async def generate(self, prompt: str, operation=None) -> str:
        self.calls.append((operation, prompt))
        response = self.responses.get(operation)
        if isinstance(response, BaseException):
            raise response
        if response is None:
            raise RuntimeError(f"No fake response for {operation}")
        return response


@pytest.fixture
def fake_generator():
    """Factory for FakeGenerator instances."""
    return FakeGenerator


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_redis() -> MagicMock:
    """
    Create a mock Redis client for unit testing.

    This allows testing Redis-dependent code without a real Redis server.
    """
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.setex = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.expire = AsyncMock(return_value=True)
    mock.ping = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_db_session() -> MagicMock:
    """
    Create a mock database session for unit testing.
    """
    mock = MagicMock()
    mock.execute = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.flush = AsyncMock()
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    mock.close = AsyncMock()
    return mock
