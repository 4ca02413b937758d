"""
LLM operation enums.

Operations are used for model selection and for attributing usage in logs.
"""

from enum import Enum


class LLMOperation(str, Enum):
    """Generative operations performed by the application."""

    FLASHCARD_GENERATION = "flashcard_generation"
    MCQ_GENERATION = "mcq_generation"
    RESULT_FEEDBACK = "result_feedback"
    DIGEST_INSIGHTS = "digest_insights"
    GENERIC = "generic"
