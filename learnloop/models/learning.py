"""
Learning Flow API Models (Pydantic)

Request/response schemas for topic learning:
- Generated flashcards and multiple-choice questions
- Quiz results and feedback
- Save-for-later checkpoints
- Session history and detail

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There is a corresponding SQLAlchemy file: learnloop/db/models_learning.py

    Data flows: API Request → Pydantic → Service → SQLAlchemy → Database

API Contract:
    Field names are camelCase on the wire (sessionId, usingSampleData, ...).
    Required-field checks that must answer 400 rather than 422 (topic,
    mcqs, selectedAnswers) are made in the routers, so those fields are
    declared Optional here.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from learnloop.enums.learning import AnswerOption, ProgressType, ViewState
from learnloop.models.base import APIModel, StrictRequest, StrictResponse


# ===========================================
# Generated Content
# ===========================================


class FlashcardItem(APIModel):
    """A generated flashcard. Content is an HTML fragment."""

    id: str
    title: str
    content: str


class MCQItem(APIModel):
    """A generated multiple-choice question with four lettered options."""

    id: str
    question: str
    options: list[str] = Field(..., min_length=4, max_length=4)
    correct_answer: AnswerOption


class GeneratedMaterials(StrictResponse):
    """Paired output of the content generator."""

    flashcards: list[FlashcardItem]
    mcqs: list[MCQItem]
    using_sample_data: bool = False


class QuizFeedback(StrictResponse):
    """Narrative feedback shown with the quiz score."""

    strengths: str
    improvements: str
    next_steps: str


# ===========================================
# Generate
# ===========================================


class GenerateRequest(StrictRequest):
    """Topic submission."""

    topic: Optional[str] = Field(None, description="Topic to learn about")
    category_id: Optional[int] = Field(
        None, description="Catalog category the topic belongs to"
    )


class GenerateResponse(StrictResponse):
    """Generated materials plus the id of the session created for them."""

    flashcards: list[FlashcardItem]
    mcqs: list[MCQItem]
    session_id: str
    using_sample_data: bool


# ===========================================
# Results
# ===========================================


class ResultsRequest(StrictRequest):
    """
    Quiz submission.

    selected_answers is positional: entry i answers mcqs[i]. Missing or
    null entries count as incorrect.
    """

    topic: Optional[str] = None
    mcqs: Optional[list[MCQItem]] = None
    selected_answers: Optional[list[Optional[str]]] = None
    session_id: Optional[str] = None
    using_sample_data: bool = False


class ResultsResponse(StrictResponse):
    """Score and feedback for a submitted quiz."""

    score: int = Field(..., description="Number of correct answers")
    score_percentage: int = Field(..., ge=0, le=100)
    correct_answers: int
    total_questions: int
    strengths: str
    improvements: str
    next_steps: str


# ===========================================
# Save for Later
# ===========================================


class SaveProgressRequest(StrictRequest):
    """
    Save-for-later checkpoint.

    For type "flashcards", current_index is the flashcard being viewed.
    For type "mcq", current_index is the question being answered and
    answers / time_remaining capture the quiz state.
    """

    session_id: Optional[str] = None
    type: Optional[ProgressType] = None
    current_index: Optional[int] = None
    answers: Optional[list[Optional[str]]] = None
    time_remaining: Optional[int] = None
    topic: Optional[str] = None


# ===========================================
# Sessions
# ===========================================


class SessionSummary(StrictResponse):
    """A learning session row as returned by the API."""

    id: str
    user_id: Optional[int] = None
    category_id: Optional[int] = None
    topic: str
    score: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    progress_type: Optional[str] = None
    progress_index: Optional[int] = None
    progress_data: Optional[dict] = None


class ResumeState(StrictResponse):
    """Where a saved session picks up again."""

    view_state: ViewState
    current_index: int
    answers: list[Optional[str]] = Field(default_factory=list)
    time_remaining: Optional[int] = None


class SessionDetailResponse(StrictResponse):
    """A session with its generated items and, if saved, its resume point."""

    session: SessionSummary
    flashcards: list[FlashcardItem]
    mcqs: list[MCQItem]
    resume_state: Optional[ResumeState] = None
