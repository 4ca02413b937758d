"""
Admin API Router

Endpoints:
- POST /api/admin/generate-digests - Run the weekly digest batch now
- GET /api/admin/jobs - Scheduled jobs and their next run times

Both are guarded by the X-API-Key header when ADMIN_API_KEY is configured.
"""

import logging

from fastapi import APIRouter, Depends, Request

from learnloop.config import settings
from learnloop.dependencies import verify_admin_api_key
from learnloop.enums import RateLimitType
from learnloop.middleware.error_handling import handle_endpoint_errors
from learnloop.middleware.rate_limit import limiter
from learnloop.models.digest import BatchResult
from learnloop.services.digest import generate_weekly_digests_for_all_users
from learnloop.services.llm.client import get_text_generator
from learnloop.services.scheduler import get_scheduled_jobs

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(verify_admin_api_key)],
)


@router.post("/generate-digests", response_model=BatchResult)
@limiter.limit(settings.get_rate_limit(RateLimitType.BATCH))
@handle_endpoint_errors("Generate digests")
async def generate_digests(request: Request) -> BatchResult:
    """
    Compute this week's digest for every opted-in user.

    Users that already have a digest for the week are skipped; a failure
    for one user is counted and does not stop the others.
    """
    logger.info("Digest batch triggered via admin API")
    return await generate_weekly_digests_for_all_users(generator=get_text_generator())


@router.get("/jobs")
@handle_endpoint_errors("List scheduled jobs")
async def list_jobs() -> dict:
    return {"jobs": get_scheduled_jobs()}
