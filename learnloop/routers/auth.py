"""
Auth API Router

Username/password accounts with server-side sessions. The session id
travels in an HttpOnly cookie; session data lives in Redis.

Endpoints:
- POST /api/register - Create an account and sign in
- POST /api/login - Sign in
- POST /api/logout - Sign out
- GET /api/user - Current user
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.config import settings
from learnloop.db.base import get_db
from learnloop.db.models import User
from learnloop.db.redis import SessionStore
from learnloop.dependencies import get_current_user, get_session_store
from learnloop.enums import RateLimitType
from learnloop.middleware.error_handling import handle_endpoint_errors
from learnloop.middleware.rate_limit import limiter
from learnloop.models.auth import LoginRequest, RegisterRequest, UserResponse
from learnloop.models.base import SuccessResponse
from learnloop.services.auth import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit(settings.get_rate_limit(RateLimitType.AUTH))
@handle_endpoint_errors("Register")
async def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
    store: SessionStore = Depends(get_session_store),
) -> UserResponse:
    """Create an account and start a session for it."""
    user = await auth.register(
        data.username,
        data.password,
        email=data.email,
        display_name=data.display_name,
    )
    session_id = await store.create_session(user.id, user.username)
    _set_session_cookie(response, session_id)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse)
@limiter.limit(settings.get_rate_limit(RateLimitType.AUTH))
@handle_endpoint_errors("Login")
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    store: SessionStore = Depends(get_session_store),
) -> UserResponse:
    user = await auth.authenticate(data.username, data.password)
    session_id = await store.create_session(user.id, user.username)
    _set_session_cookie(response, session_id)
    logger.info(f"User {user.id} logged in")
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=SuccessResponse)
@handle_endpoint_errors("Logout")
async def logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_session_store),
) -> SuccessResponse:
    """End the current session. Succeeds for anonymous requests too."""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if session_id:
        await store.delete_session(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return SuccessResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)
