"""
Rate Limiting Middleware

Prevents abuse of the generative and login endpoints using SlowAPI.

Usage:
    from learnloop.middleware.rate_limit import limiter
    from learnloop.enums import RateLimitType
    from learnloop.config import settings

    @router.post("/generate")
    @limiter.limit(settings.get_rate_limit(RateLimitType.LLM_HEAVY))
    async def generate(request: Request, ...):
        ...

Rate limit configurations (from config/default.yaml):
- DEFAULT: General API endpoints
- LLM_HEAVY: Endpoints that call the generative service
- AUTH: Register / login attempts
- BATCH: Digest batch trigger
"""

import logging

from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from learnloop.config import settings
from learnloop.enums import RateLimitType

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """
    Get client identifier for rate limiting.

    Uses the first address of X-Forwarded-For when behind a proxy,
    otherwise the direct client address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[settings.get_rate_limit(RateLimitType.DEFAULT)],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def setup_rate_limiting(app: FastAPI, enabled: bool = True) -> None:
    """
    Configure rate limiting on the FastAPI app.

    Args:
        app: FastAPI application instance
        enabled: Whether to enable rate limiting
    """
    # Decorated endpoints look up app.state.limiter even when disabled
    app.state.limiter = limiter
    if not enabled:
        limiter.enabled = False
        logger.info("Rate limiting disabled")
        return

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    logger.info("Rate limiting enabled")
