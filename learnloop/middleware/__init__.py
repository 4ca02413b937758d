"""
Middleware Package

Provides FastAPI middleware for:
- Rate limiting
- Error handling

Rate limiting usage:
    from learnloop.middleware import limiter
    from learnloop.enums import RateLimitType
    from learnloop.config import settings

    @limiter.limit(settings.get_rate_limit(RateLimitType.LLM_HEAVY))
    async def my_endpoint(request: Request):
        ...
"""

from learnloop.middleware.error_handling import (
    AuthenticationError,
    AuthorizationError,
    ErrorHandlingMiddleware,
    LLMError,
    NotFoundError,
    ServiceError,
    ValidationError,
    handle_endpoint_errors,
    setup_error_handling,
)
from learnloop.middleware.rate_limit import limiter, setup_rate_limiting

__all__ = [
    "setup_rate_limiting",
    "limiter",
    "setup_error_handling",
    "handle_endpoint_errors",
    "ErrorHandlingMiddleware",
    "ServiceError",
    "LLMError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
]
