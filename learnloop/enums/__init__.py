"""
Centralized enum definitions for the application.

All enums are organized by domain:
- learning.py: Learning flow states, checkpoints, digest insights
- llm.py: Generative operations
- api.py: Rate limit categories

Usage:
    from learnloop.enums import ViewState, ProgressType

    # Or import from specific module
    from learnloop.enums.learning import InsightType
"""

from learnloop.enums.api import RateLimitType
from learnloop.enums.learning import (
    AnswerOption,
    InsightType,
    PerformanceLevel,
    ProgressType,
    ViewState,
)
from learnloop.enums.llm import LLMOperation

__all__ = [
    # Learning
    "AnswerOption",
    "InsightType",
    "PerformanceLevel",
    "ProgressType",
    "ViewState",
    # LLM
    "LLMOperation",
    # API
    "RateLimitType",
]
