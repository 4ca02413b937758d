"""
Learning System Enums

Defines enums for the topic learning flow (flashcards then quiz),
progress checkpoints, and weekly digest insights.
"""

from enum import Enum


class ViewState(str, Enum):
    """
    States of a learning session as seen by the learner.

    State transitions:
    - TOPIC_INPUT → LOADING (topic submitted)
    - LOADING → FLASHCARD (materials generated)
    - FLASHCARD → MCQ (advanced past the last flashcard)
    - MCQ → RESULTS (last question answered or timer expired)
    """

    TOPIC_INPUT = "topicInput"
    LOADING = "loading"
    FLASHCARD = "flashcard"
    MCQ = "mcq"
    RESULTS = "results"


class ProgressType(str, Enum):
    """Where a saved-for-later checkpoint was taken."""

    FLASHCARDS = "flashcards"
    MCQ = "mcq"


class AnswerOption(str, Enum):
    """Letter tags for the four options of a multiple-choice question."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


class InsightType(str, Enum):
    """
    Baseline digest insight types.

    Generated insights may carry free-form types (e.g. "learning_pattern",
    "growth_area"); these four are always computed from the weekly stats.
    """

    ACTIVITY = "activity"
    PERFORMANCE = "performance"
    STREAK = "streak"
    TIME_SPENT = "timeSpent"


class PerformanceLevel(str, Enum):
    """Average quiz score bands used in the performance insight."""

    EXCELLENT = "excellent"  # >= 80
    GOOD = "good"  # >= 60
    NEEDS_IMPROVEMENT = "needs improvement"
