"""
Integration Test Fixtures

Provides fixtures for integration tests that require a running PostgreSQL.
These fixtures set up real database connections and clean up after tests.

IMPORTANT: All integration tests use the TEST database only (via the
POSTGRES_TEST_* env vars mapped in tests/conftest.py). A safety check
(verify_test_database) runs at session start to fail fast if production
credentials are detected.

Integration test modules set pytestmark = pytest.mark.integration and are
deselected by default. Run with: pytest -m integration
"""

import os
from typing import AsyncGenerator
from urllib.parse import quote_plus

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Child tables first
TABLES_TO_CLEAN = [
    "learning_digests",
    "mcqs",
    "flashcards",
    "learning_sessions",
    "path_progress",
    "learning_paths",
    "topics",
    "categories",
    "user_preferences",
    "users",
]


# =============================================================================
# Safety Check - Runs before any integration tests
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def verify_test_database():
    """
    Fail fast if the configured database looks like production.

    Set ALLOW_PROD_DB_TESTS=1 to skip this check (for local development only).
    """
    if os.environ.get("ALLOW_PROD_DB_TESTS", "").lower() in ("1", "true", "yes"):
        return

    db_name = os.environ.get("POSTGRES_DB", "")
    db_user = os.environ.get("POSTGRES_USER", "")

    for indicator in ["learnloop", "prod", "production"]:
        assert indicator not in db_name.lower(), (
            f"SAFETY CHECK FAILED: Database name '{db_name}' looks like production! "
            "Set POSTGRES_TEST_DB environment variable or ALLOW_PROD_DB_TESTS=1."
        )
        assert indicator not in db_user.lower(), (
            f"SAFETY CHECK FAILED: Database user '{db_user}' looks like production! "
            "Set POSTGRES_TEST_USER environment variable or ALLOW_PROD_DB_TESTS=1."
        )


# =============================================================================
# Database Configuration
# =============================================================================


def get_test_db_url(async_driver: bool = True) -> str:
    """Build the test database URL from the environment."""
    password = quote_plus(os.environ.get("POSTGRES_PASSWORD", ""))
    driver = "postgresql+asyncpg" if async_driver else "postgresql+psycopg2"
    return (
        f"{driver}://{os.environ['POSTGRES_USER']}:{password}"
        f"@{os.environ['POSTGRES_HOST']}:{os.environ['POSTGRES_PORT']}"
        f"/{os.environ['POSTGRES_DB']}"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_database(verify_test_database):
    """
    Recreate all tables once per test session.

    Uses synchronous SQLAlchemy to avoid event loop issues.
    """
    from learnloop.db.base import Base

    sync_engine = create_engine(get_test_db_url(async_driver=False))
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)

    yield

    sync_engine.dispose()


@pytest_asyncio.fixture
async def clean_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Session on freshly truncated tables.

    Creates a fresh engine per test so connections belong to the test's
    event loop. WARNING: This truncates tables!
    """
    test_engine = create_async_engine(get_test_db_url(async_driver=True), echo=False)
    test_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    truncate = text(
        f"TRUNCATE TABLE {', '.join(TABLES_TO_CLEAN)} RESTART IDENTITY CASCADE"
    )

    async with test_session_maker() as session:
        await session.execute(truncate)
        await session.commit()

        yield session

        await session.rollback()
        await session.execute(truncate)
        await session.commit()

    await test_engine.dispose()


@pytest_asyncio.fixture
async def async_test_client(clean_db: AsyncSession):
    """
    Async HTTP client whose requests use the test database session.

    Requests are anonymous; get_current_user_optional is overridden so no
    Redis is needed.
    """
    from learnloop.db.base import get_db
    from learnloop.dependencies import get_current_user_optional
    from learnloop.main import app

    async def get_test_db():
        yield clean_db

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_current_user_optional] = lambda: None

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
