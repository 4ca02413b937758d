"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated. Non-secret
tunables (pool sizes, TTLs, schedules) live in config/default.yaml.

Usage:
    from learnloop.config import settings

    # Access settings
    db_url = settings.POSTGRES_URL
    redis_url = settings.REDIS_URL
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic_settings import BaseSettings

from learnloop.enums.api import RateLimitType


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()

_digest_config: dict[str, Any] = yaml_config.get("digest", {})
_rate_limit_config: dict[str, Any] = yaml_config.get("rate_limits", {})
_redis_config: dict[str, Any] = yaml_config.get("redis", {})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "LearnLoop"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = ["*"]

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "learnloop"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "learnloop"

    @property
    def POSTGRES_URL(self) -> str:
        """Async PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def POSTGRES_URL_SYNC(self) -> str:
        """Sync PostgreSQL connection URL for Alembic migrations."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis (server-side login sessions)
    REDIS_URL: str = "redis://localhost:6379/0"

    # LLM providers
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    GEMINI_API_KEY: str = ""

    # Text model for flashcards, questions, feedback and digest insights.
    # Format: provider/model-name (LiteLLM)
    TEXT_MODEL: str = "openai/gpt-4o"
    LLM_MAX_RETRIES: int = 3
    LLM_TIMEOUT_SECONDS: Optional[float] = None

    # Auth
    SESSION_COOKIE_NAME: str = "learnloop_session"
    SESSION_TTL_SECONDS: int = _redis_config.get("session_ttl", 30 * 24 * 60 * 60)
    SESSION_COOKIE_SECURE: bool = False
    ADMIN_API_KEY: str = ""
    PASSWORD_PEPPER: str = ""

    # Quiz
    QUIZ_TIME_LIMIT_SECONDS: int = 300

    # Weekly digests
    DIGEST_SCHEDULE_ENABLED: bool = _digest_config.get("schedule_enabled", True)
    DIGEST_CRON_DAY_OF_WEEK: str = _digest_config.get("day_of_week", "sun")
    DIGEST_CRON_HOUR: int = _digest_config.get("hour", 23)
    DIGEST_MAX_AI_INSIGHTS: int = _digest_config.get("max_ai_insights", 2)
    DIGEST_RECOMMENDATION_TARGET: int = _digest_config.get(
        "recommendation_target", 5
    )

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMITS: dict[str, str] = {
        RateLimitType.DEFAULT.value: _rate_limit_config.get("default", "100/minute"),
        RateLimitType.LLM_HEAVY.value: _rate_limit_config.get("llm_heavy", "10/minute"),
        RateLimitType.AUTH.value: _rate_limit_config.get("auth", "5/minute"),
        RateLimitType.BATCH.value: _rate_limit_config.get("batch", "5/minute"),
    }

    @property
    def llm_enabled(self) -> bool:
        """Whether any LLM provider key is configured."""
        return bool(
            self.OPENAI_API_KEY or self.ANTHROPIC_API_KEY or self.GEMINI_API_KEY
        )

    def get_rate_limit(self, rate_limit_type: RateLimitType) -> str:
        """Get the rate limit string for an endpoint category."""
        return self.RATE_LIMITS.get(
            rate_limit_type.value, self.RATE_LIMITS[RateLimitType.DEFAULT.value]
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
