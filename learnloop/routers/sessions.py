"""
Sessions API Router

Endpoints:
- GET /api/sessions/{session_id} - A session with its materials and resume point
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from learnloop.db.models import User
from learnloop.db.models_learning import LearningSession
from learnloop.dependencies import get_current_user_optional
from learnloop.middleware.error_handling import handle_endpoint_errors
from learnloop.models.learning import (
    FlashcardItem,
    MCQItem,
    ResumeState,
    SessionDetailResponse,
    SessionSummary,
)
from learnloop.routers.learning import get_session_repository
from learnloop.services.learning import (
    InvalidTransitionError,
    LearningProgress,
    LearningSessionRepository,
)
from learnloop.services.learning.progress import checkpoint_from_json

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def build_resume_state(
    session: LearningSession, flashcard_count: int, mcq_count: int
) -> Optional[ResumeState]:
    """Resume point of a saved session, or None if there is no usable checkpoint."""
    if session.completed_at is not None or session.progress_type is None:
        return None

    checkpoint = checkpoint_from_json(
        session.progress_type, session.progress_index or 0, session.progress_data
    )
    try:
        progress = LearningProgress.resume(checkpoint, flashcard_count, mcq_count)
    except InvalidTransitionError as e:
        logger.warning(f"Ignoring unusable checkpoint on session {session.id}: {e}")
        return None

    return ResumeState(
        view_state=progress.state,
        current_index=progress.current_index,
        answers=progress.answers,
        time_remaining=progress.time_remaining,
    )


@router.get("/{session_id}", response_model=SessionDetailResponse)
@handle_endpoint_errors("Get session")
async def get_session(
    session_id: str,
    repo: LearningSessionRepository = Depends(get_session_repository),
    user: Optional[User] = Depends(get_current_user_optional),
) -> SessionDetailResponse:
    """
    Get a session with its flashcards and questions.

    Returns 404 for unknown ids and 403 when the session belongs to a
    different user (or to anyone, for anonymous requests).
    """
    session = await repo.get_accessible_session(
        session_id, user.id if user is not None else None
    )
    flashcards = await repo.get_flashcards(session.id)
    mcqs = await repo.get_mcqs(session.id)

    return SessionDetailResponse(
        session=SessionSummary.model_validate(session),
        flashcards=[FlashcardItem.model_validate(f) for f in flashcards],
        mcqs=[MCQItem.model_validate(m) for m in mcqs],
        resume_state=build_resume_state(session, len(flashcards), len(mcqs)),
    )
