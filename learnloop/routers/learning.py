"""
Learning API Router

Endpoints for the topic learning flow: material generation, quiz scoring,
and save-for-later checkpoints.

Endpoints:
- POST /api/learning/generate - Generate flashcards and questions for a topic
- POST /api/learning/results - Score a quiz and return feedback
- POST /api/learning/save-progress - Record a save-for-later checkpoint
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.config import settings
from learnloop.db.base import get_db
from learnloop.db.models import User
from learnloop.dependencies import get_current_user_optional
from learnloop.enums import ProgressType, RateLimitType
from learnloop.middleware.error_handling import ValidationError, handle_endpoint_errors
from learnloop.middleware.rate_limit import limiter
from learnloop.models.base import SuccessResponse
from learnloop.models.learning import (
    GenerateRequest,
    GenerateResponse,
    ResultsRequest,
    ResultsResponse,
    SaveProgressRequest,
)
from learnloop.services.learning import (
    ContentGenerator,
    LearningProgress,
    LearningSessionRepository,
    ProgressCheckpoint,
)
from learnloop.services.learning.progress import MIN_TOPIC_LENGTH
from learnloop.services.llm.client import get_text_generator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/learning", tags=["learning"])


# ===========================================
# Dependency Injection
# ===========================================


def get_content_generator() -> ContentGenerator:
    """Content generator backed by the configured LLM (None → sample content)."""
    return ContentGenerator(get_text_generator())


async def get_session_repository(
    db: AsyncSession = Depends(get_db),
) -> LearningSessionRepository:
    return LearningSessionRepository(db)


def _user_id(user: Optional[User]) -> Optional[int]:
    return user.id if user is not None else None


# ===========================================
# Generation
# ===========================================


@router.post("/generate", response_model=GenerateResponse)
@limiter.limit(settings.get_rate_limit(RateLimitType.LLM_HEAVY))
@handle_endpoint_errors("Generate learning materials")
async def generate_materials(
    request: Request,
    data: GenerateRequest,
    generator: ContentGenerator = Depends(get_content_generator),
    repo: LearningSessionRepository = Depends(get_session_repository),
    user: Optional[User] = Depends(get_current_user_optional),
) -> GenerateResponse:
    """
    Generate flashcards and questions for a topic and open a session.

    Generation failures never surface here: the response then carries the
    sample set with usingSampleData=true.
    """
    topic = (data.topic or "").strip()
    if not topic:
        raise ValidationError("Topic is required")
    if len(topic) < MIN_TOPIC_LENGTH:
        raise ValidationError(f"Topic must be at least {MIN_TOPIC_LENGTH} characters")

    materials = await generator.generate_materials(topic)

    session_id = await repo.create_session(
        topic, user_id=_user_id(user), category_id=data.category_id
    )
    await repo.save_flashcards(session_id, materials.flashcards)
    await repo.save_mcqs(session_id, materials.mcqs)

    return GenerateResponse(
        flashcards=materials.flashcards,
        mcqs=materials.mcqs,
        session_id=session_id,
        using_sample_data=materials.using_sample_data,
    )


# ===========================================
# Results
# ===========================================


@router.post("/results", response_model=ResultsResponse)
@limiter.limit(settings.get_rate_limit(RateLimitType.LLM_HEAVY))
@handle_endpoint_errors("Get quiz results")
async def get_results(
    request: Request,
    data: ResultsRequest,
    generator: ContentGenerator = Depends(get_content_generator),
    repo: LearningSessionRepository = Depends(get_session_repository),
    user: Optional[User] = Depends(get_current_user_optional),
) -> ResultsResponse:
    """
    Score submitted answers positionally and attach feedback.

    When sessionId is given the session is completed with the percentage
    score.
    """
    if not data.topic or data.mcqs is None or data.selected_answers is None:
        raise ValidationError("Topic, mcqs and selectedAnswers are required")

    session = None
    if data.session_id:
        session = await repo.get_accessible_session(data.session_id, _user_id(user))

    results = await generator.generate_results(
        data.topic,
        data.mcqs,
        data.selected_answers,
        using_sample_data=data.using_sample_data,
    )

    if session is not None:
        await repo.complete_session(session, results.score_percentage)
        logger.info(
            f"Completed session {session.id} with score {results.score_percentage}%"
        )

    return results


# ===========================================
# Save for Later
# ===========================================


@router.post("/save-progress", response_model=SuccessResponse)
@handle_endpoint_errors("Save progress")
async def save_progress(
    data: SaveProgressRequest,
    repo: LearningSessionRepository = Depends(get_session_repository),
    user: Optional[User] = Depends(get_current_user_optional),
) -> SuccessResponse:
    """
    Store where the learner stopped.

    The checkpoint is checked against the session's materials (index in
    range, answer count, remaining time) before it is written.
    """
    if not data.session_id or data.type is None or data.current_index is None:
        raise ValidationError("sessionId, type and currentIndex are required")

    session = await repo.get_accessible_session(data.session_id, _user_id(user))
    if session.completed_at is not None:
        raise ValidationError("Session is already completed")

    checkpoint = ProgressCheckpoint(
        type=data.type,
        index=data.current_index,
        topic=data.topic or session.topic,
    )
    if data.type == ProgressType.MCQ:
        checkpoint.answers = list(data.answers or [])
        checkpoint.time_remaining = data.time_remaining

    flashcards = await repo.get_flashcards(session.id)
    mcqs = await repo.get_mcqs(session.id)
    LearningProgress.resume(checkpoint, len(flashcards), len(mcqs))

    await repo.save_progress(session, checkpoint)
    return SuccessResponse(message="Progress saved")
