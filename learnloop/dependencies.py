"""
FastAPI Dependencies

Common dependencies for authentication and admin access.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.config import settings
from learnloop.db.base import get_db
from learnloop.db.models import User
from learnloop.db.redis import SessionStore, session_store
from learnloop.middleware.error_handling import AuthenticationError
from learnloop.services.auth.service import AuthService

# API Key header scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_session_store() -> SessionStore:
    return session_store


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> Optional[User]:
    """
    Resolve the login cookie to a user.

    Returns None for anonymous requests, unknown or expired sessions, and
    sessions whose user no longer exists.
    """
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        return None

    data = await store.get_session(session_id)
    if not data:
        return None

    return await AuthService(db).get_user(data["user_id"])


async def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """Require a signed-in user (401 otherwise)."""
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


async def verify_admin_api_key(
    api_key: Optional[str] = Depends(api_key_header),
) -> str:
    """
    Verify the admin API key from the X-API-Key header.

    If ADMIN_API_KEY is not configured (empty string), the check is
    disabled (development mode).

    Raises:
        HTTPException: 401 if the key is missing or invalid
    """
    if not settings.ADMIN_API_KEY:
        return "dev-mode"

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if api_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key
