"""
Learning Session Repository

Persistence for learning sessions and their generated items.

Session creation and item insertion are separate statements: a session
row may briefly exist without its flashcards and questions. Nothing
reads a session before /api/learning/generate returns, so the gap is
not observable through the API.

Usage:
    repo = LearningSessionRepository(db)
    session_id = await repo.create_session("Photosynthesis", user_id=user.id)
    await repo.save_flashcards(session_id, materials.flashcards)
    await repo.save_mcqs(session_id, materials.mcqs)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.db.models_learning import Flashcard, LearningSession, MCQuestion
from learnloop.middleware.error_handling import AuthorizationError, NotFoundError
from learnloop.models.learning import FlashcardItem, MCQItem
from learnloop.services.learning.progress import ProgressCheckpoint, checkpoint_to_json

logger = logging.getLogger(__name__)


class LearningSessionRepository:
    """Reads and writes learning sessions, flashcards and questions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_session(
        self,
        topic: str,
        user_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> str:
        """Insert a new in-progress session and return its id."""
        session = LearningSession(
            id=str(uuid.uuid4()),
            topic=topic,
            user_id=user_id,
            category_id=category_id,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(session)
        await self.db.flush()
        logger.debug(f"Created learning session {session.id} for '{topic}'")
        return session.id

    async def save_flashcards(
        self, session_id: str, flashcards: Sequence[FlashcardItem]
    ) -> None:
        """Persist generated flashcards, keeping their generated ids and order."""
        for position, card in enumerate(flashcards):
            self.db.add(
                Flashcard(
                    id=card.id,
                    session_id=session_id,
                    position=position,
                    title=card.title,
                    content=card.content,
                )
            )
        await self.db.flush()

    async def save_mcqs(self, session_id: str, mcqs: Sequence[MCQItem]) -> None:
        """Persist generated questions, keeping their generated ids and order."""
        for position, mcq in enumerate(mcqs):
            self.db.add(
                MCQuestion(
                    id=mcq.id,
                    session_id=session_id,
                    position=position,
                    question=mcq.question,
                    options=list(mcq.options),
                    correct_answer=mcq.correct_answer.value,
                )
            )
        await self.db.flush()

    async def get_session(self, session_id: str) -> Optional[LearningSession]:
        return await self.db.get(LearningSession, session_id)

    async def get_accessible_session(
        self, session_id: str, user_id: Optional[int]
    ) -> LearningSession:
        """
        Load a session on behalf of a requester.

        Sessions without an owner are open to everyone. An owned session is
        only visible to its owner; anonymous requesters are refused too.

        Raises:
            NotFoundError: Unknown session id.
            AuthorizationError: The session belongs to someone else.
        """
        session = await self.get_session(session_id)
        if session is None:
            raise NotFoundError("Session not found")
        if session.user_id is not None and session.user_id != user_id:
            raise AuthorizationError("Not authorized to access this session")
        return session

    async def get_flashcards(self, session_id: str) -> list[Flashcard]:
        result = await self.db.execute(
            select(Flashcard)
            .where(Flashcard.session_id == session_id)
            .order_by(Flashcard.position)
        )
        return list(result.scalars().all())

    async def get_mcqs(self, session_id: str) -> list[MCQuestion]:
        result = await self.db.execute(
            select(MCQuestion)
            .where(MCQuestion.session_id == session_id)
            .order_by(MCQuestion.position)
        )
        return list(result.scalars().all())

    async def complete_session(self, session: LearningSession, score: int) -> None:
        """Record the quiz score and clear any save-for-later checkpoint."""
        session.score = score
        session.completed_at = datetime.now(timezone.utc)
        session.progress_type = None
        session.progress_index = None
        session.progress_data = None
        await self.db.flush()

    async def save_progress(
        self, session: LearningSession, checkpoint: ProgressCheckpoint
    ) -> None:
        session.progress_type = checkpoint.type.value
        session.progress_index = checkpoint.index
        session.progress_data = checkpoint_to_json(checkpoint)
        await self.db.flush()

    async def list_user_sessions(self, user_id: int) -> list[LearningSession]:
        """All sessions owned by a user, newest first."""
        result = await self.db.execute(
            select(LearningSession)
            .where(LearningSession.user_id == user_id)
            .order_by(LearningSession.created_at.desc())
        )
        return list(result.scalars().all())
