"""
User API Router

Endpoints for the signed-in user's history, preferences and weekly digests.
All endpoints require authentication (401 otherwise).

Endpoints:
- GET /api/user/history - Learning sessions, newest first
- GET /api/user/preferences - Current preferences
- PUT /api/user/preferences - Update preferences
- GET /api/user/digest/latest - Most recent digest
- GET /api/user/digest/{week_start} - Digest of a given week (ISO date)
- GET /api/user/digests - All digests, newest week first
- POST /api/user/digest/generate - Compute this week's digest now
- POST /api/user/digests/{digest_id}/opened - Mark a digest as opened
"""

import logging
from datetime import date, datetime, time, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.db.base import get_db
from learnloop.db.models import User
from learnloop.dependencies import get_current_user
from learnloop.middleware.error_handling import NotFoundError, handle_endpoint_errors
from learnloop.models.base import SuccessResponse
from learnloop.models.digest import (
    DigestGenerateResponse,
    DigestResponse,
    PreferencesResponse,
    PreferencesUpdate,
)
from learnloop.models.learning import SessionSummary
from learnloop.routers.learning import get_session_repository
from learnloop.services.auth import AuthService
from learnloop.services.digest import DigestService
from learnloop.services.learning import LearningSessionRepository
from learnloop.services.llm.client import get_text_generator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/user", tags=["user"])


# ===========================================
# Dependency Injection
# ===========================================


async def get_digest_service(db: AsyncSession = Depends(get_db)) -> DigestService:
    return DigestService(db, generator=get_text_generator())


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


# ===========================================
# History & Preferences
# ===========================================


@router.get("/history", response_model=list[SessionSummary])
@handle_endpoint_errors("Get history")
async def get_history(
    user: User = Depends(get_current_user),
    repo: LearningSessionRepository = Depends(get_session_repository),
) -> list[SessionSummary]:
    sessions = await repo.list_user_sessions(user.id)
    return [SessionSummary.model_validate(s) for s in sessions]


@router.get("/preferences", response_model=PreferencesResponse)
@handle_endpoint_errors("Get preferences")
async def get_preferences(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> PreferencesResponse:
    preferences = await auth.get_preferences(user.id)
    return PreferencesResponse.model_validate(preferences)


@router.put("/preferences", response_model=PreferencesResponse)
@handle_endpoint_errors("Update preferences")
async def update_preferences(
    data: PreferencesUpdate,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> PreferencesResponse:
    """Partial update; omitted fields are left unchanged."""
    preferences = await auth.update_preferences(
        user.id,
        weekly_digest_enabled=data.weekly_digest_enabled,
        theme=data.theme,
    )
    return PreferencesResponse.model_validate(preferences)


# ===========================================
# Digests
# ===========================================


@router.get("/digest/latest", response_model=DigestResponse)
@handle_endpoint_errors("Get latest digest")
async def get_latest_digest(
    user: User = Depends(get_current_user),
    service: DigestService = Depends(get_digest_service),
) -> DigestResponse:
    digest = await service.get_latest_digest(user.id)
    if digest is None:
        raise NotFoundError("No digest found")
    return DigestResponse.model_validate(digest)


@router.get("/digest/{week_start}", response_model=DigestResponse)
@handle_endpoint_errors("Get weekly digest")
async def get_digest_for_week(
    week_start: date,
    user: User = Depends(get_current_user),
    service: DigestService = Depends(get_digest_service),
) -> DigestResponse:
    """Digest whose window starts on week_start (a Monday, ISO format)."""
    start = datetime.combine(week_start, time.min, tzinfo=timezone.utc)
    digest = await service.get_digest_for_week(user.id, start)
    if digest is None:
        raise NotFoundError(f"No digest found for week starting {week_start}")
    return DigestResponse.model_validate(digest)


@router.get("/digests", response_model=list[DigestResponse])
@handle_endpoint_errors("List digests")
async def list_digests(
    user: User = Depends(get_current_user),
    service: DigestService = Depends(get_digest_service),
) -> list[DigestResponse]:
    digests = await service.list_digests(user.id)
    return [DigestResponse.model_validate(d) for d in digests]


@router.post("/digest/generate", response_model=DigestGenerateResponse)
@handle_endpoint_errors("Generate digest")
async def generate_digest(
    user: User = Depends(get_current_user),
    service: DigestService = Depends(get_digest_service),
) -> DigestGenerateResponse:
    """
    Compute the current week's digest for the signed-in user.

    If one already exists for this week it is returned with created=false.
    """
    outcome = await service.generate_current_week(user.id)
    digest = outcome.digest
    if digest is None:
        digest = await service.get_latest_digest(user.id)

    return DigestGenerateResponse(
        created=outcome.created,
        message=(
            "Digest created" if outcome.created else "Digest already exists for this week"
        ),
        digest=DigestResponse.model_validate(digest) if digest is not None else None,
    )


@router.post("/digests/{digest_id}/opened", response_model=SuccessResponse)
@handle_endpoint_errors("Mark digest opened")
async def mark_digest_opened(
    digest_id: int,
    user: User = Depends(get_current_user),
    service: DigestService = Depends(get_digest_service),
) -> SuccessResponse:
    digest = await service.get_digest(digest_id)
    if digest is None or digest.user_id != user.id:
        raise NotFoundError("Digest not found")
    await service.mark_opened(digest)
    return SuccessResponse(message="Digest marked as opened")
