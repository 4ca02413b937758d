"""
Error Handling Middleware

Provides consistent error responses across the API.

Features:
- Standardized error response format
- Correlation IDs for log tracking
- Custom exception classes mapped to HTTP status codes
- Endpoint decorator that turns unexpected failures into HTTP 500

Usage:
    from learnloop.middleware.error_handling import setup_error_handling, NotFoundError

    setup_error_handling(app, debug=settings.DEBUG)

    raise NotFoundError(f"Session {session_id} not found")

Exception handling hierarchy:
    - HTTPException: Re-raised for FastAPI's built-in handler
    - ServiceError: Custom exceptions → structured JSON response
    - Exception: Catch-all → HTTP 500 whose message is the exception text

Error envelope:
    {"error": "not_found", "message": "...", "error_id": "1a2b3c4d",
     "details": null, "timestamp": "2024-01-15T10:30:00+00:00"}
"""

import logging
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


# =============================================================================
# Error Response Schema
# =============================================================================


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error: str  # Error code (e.g., "not_found")
    message: str  # Human-readable message
    error_id: str  # For log correlation
    details: Optional[dict] = None
    timestamp: datetime


# =============================================================================
# Custom Exceptions
# =============================================================================


class ServiceError(Exception):
    """
    Base exception for service errors.

    Subclasses fix the HTTP status code and error code; instances may
    override either and attach details.

    Example:
        raise ServiceError("Database connection failed", status_code=503)
    """

    status_code: int = 500
    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details


class LLMError(ServiceError):
    """
    Generative provider error.

    Raised when LLM API calls fail (rate limits, timeouts, malformed
    output). Learning and digest services recover from it locally.
    """

    status_code = 502
    error_code = "llm_error"


class ValidationError(ServiceError):
    """Request data failed validation (missing topic, bad checkpoint)."""

    status_code = 400
    error_code = "validation_error"


class AuthenticationError(ServiceError):
    """Caller is not signed in or supplied bad credentials."""

    status_code = 401
    error_code = "unauthorized"


class AuthorizationError(ServiceError):
    """Caller is signed in but does not own the resource."""

    status_code = 403
    error_code = "forbidden"


class NotFoundError(ServiceError):
    """Requested resource doesn't exist."""

    status_code = 404
    error_code = "not_found"


# =============================================================================
# Response Builders
# =============================================================================


def create_error_response(
    error_code: str,
    message: str,
    status_code: int = 500,
    details: Optional[dict] = None,
    error_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        error_code: Error code for categorization
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional details
        error_id: Correlation id; generated when omitted

    Returns:
        JSONResponse with standardized error format
    """
    body = ErrorResponse(
        error=error_code,
        message=message,
        error_id=error_id or str(uuid4())[:8],
        details=details,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _service_error_response(
    request: Request, e: ServiceError, debug: bool
) -> JSONResponse:
    error_id = str(uuid4())[:8]
    logger.warning(
        f"[{error_id}] {e.error_code}: {e.message}",
        extra={
            "error_id": error_id,
            "error_code": e.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return create_error_response(
        e.error_code,
        e.message,
        status_code=e.status_code,
        details=e.details if debug else None,
        error_id=error_id,
    )


# =============================================================================
# Error Handling Middleware
# =============================================================================


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    - Catches unhandled exceptions
    - Logs with correlation ID
    - Returns consistent error format
    """

    def __init__(self, app, debug: bool = False):
        """
        Args:
            app: FastAPI/Starlette application
            debug: Whether to include stack traces in responses
        """
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        """Process request and handle any errors."""
        try:
            return await call_next(request)

        except HTTPException:
            raise

        except ServiceError as e:
            return _service_error_response(request, e, self.debug)

        except Exception as e:
            error_id = str(uuid4())[:8]
            logger.error(
                f"[{error_id}] Unhandled error: {type(e).__name__}: {e}",
                extra={
                    "error_id": error_id,
                    "path": request.url.path,
                    "method": request.method,
                    "traceback": traceback.format_exc(),
                },
            )

            details = None
            if self.debug:
                details = {
                    "exception": type(e).__name__,
                    "traceback": traceback.format_exc(),
                }

            return create_error_response(
                "internal_server_error",
                str(e) or "Internal Server Error",
                status_code=500,
                details=details,
                error_id=error_id,
            )


# =============================================================================
# Setup Function
# =============================================================================


def setup_error_handling(app: FastAPI, debug: bool = False) -> None:
    """
    Configure error handling on the FastAPI app.

    ServiceErrors raised inside routes are answered by an exception
    handler; anything else escaping the app is caught by the middleware.

    Args:
        app: FastAPI application instance
        debug: Whether to include stack traces in responses
    """

    async def service_error_handler(request: Request, exc: ServiceError):
        return _service_error_response(request, exc, debug)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    logger.info(f"Error handling middleware enabled (debug={debug})")


# =============================================================================
# Endpoint Decorator
# =============================================================================


def handle_endpoint_errors(operation: str) -> Callable:
    """
    Decorator for router endpoints.

    HTTPException and ServiceError pass through untouched; any other
    exception is logged and converted to HTTP 500 carrying its message.

    Usage:
        @router.get("/history")
        @handle_endpoint_errors("Get history")
        async def get_history(...):
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except (HTTPException, ServiceError):
                raise
            except Exception as e:
                logger.error(f"{operation} failed: {e}")
                raise HTTPException(status_code=500, detail=str(e))

        return wrapper

    return decorator
