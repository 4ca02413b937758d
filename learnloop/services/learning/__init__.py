"""
Learning Services

- content_generator.py: Flashcards, questions and quiz feedback (with sample fallback)
- sample_data.py: Static topic-parameterized content
- progress.py: Session state machine and save-for-later checkpoints
- session_store.py: Persistence for sessions and generated items
"""

from learnloop.services.learning.content_generator import ContentGenerator
from learnloop.services.learning.progress import (
    InvalidTransitionError,
    LearningProgress,
    ProgressCheckpoint,
)
from learnloop.services.learning.session_store import LearningSessionRepository

__all__ = [
    "ContentGenerator",
    "InvalidTransitionError",
    "LearningProgress",
    "LearningSessionRepository",
    "ProgressCheckpoint",
]
