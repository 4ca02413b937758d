"""
Unit Tests for the Learning Progress State Machine

Tests for:
- topic_input → loading → flashcard → mcq → results transitions
- Quiz timer expiry and answer resubmission
- Save-for-later checkpoints and resume validation
- Checkpoint (de)serialization for LearningSession.progress_data
"""

import pytest

from learnloop.enums.learning import ProgressType, ViewState
from learnloop.middleware.error_handling import ValidationError
from learnloop.services.learning.progress import (
    InvalidTransitionError,
    LearningProgress,
    ProgressCheckpoint,
    checkpoint_from_json,
    checkpoint_to_json,
)


@pytest.fixture
def at_flashcards() -> LearningProgress:
    progress = LearningProgress(time_limit=300)
    progress.begin("Cats")
    progress.materials_loaded(flashcard_count=3, mcq_count=5)
    return progress


@pytest.fixture
def at_quiz(at_flashcards: LearningProgress) -> LearningProgress:
    for _ in range(3):
        at_flashcards.advance_flashcard()
    return at_flashcards


class TestTransitions:
    def test_happy_path(self, at_quiz: LearningProgress) -> None:
        assert at_quiz.state == ViewState.MCQ
        assert at_quiz.time_remaining == 300

        for letter in ["A", "B", "C", "D", "A"]:
            at_quiz.select_answer(letter)

        assert at_quiz.state == ViewState.RESULTS
        assert at_quiz.answers == ["A", "B", "C", "D", "A"]

    def test_begin_rejects_short_topic(self) -> None:
        with pytest.raises(InvalidTransitionError):
            LearningProgress().begin(" x ")

    def test_flashcards_advance_then_quiz(self, at_flashcards: LearningProgress) -> None:
        at_flashcards.advance_flashcard()
        assert at_flashcards.state == ViewState.FLASHCARD
        assert at_flashcards.current_index == 1

        at_flashcards.advance_flashcard()
        at_flashcards.advance_flashcard()

        assert at_flashcards.state == ViewState.MCQ
        assert at_flashcards.current_index == 0
        assert at_flashcards.answers == []

    def test_answer_outside_quiz_is_rejected(
        self, at_flashcards: LearningProgress
    ) -> None:
        with pytest.raises(InvalidTransitionError):
            at_flashcards.select_answer("A")

    def test_invalid_letter(self, at_quiz: LearningProgress) -> None:
        with pytest.raises(InvalidTransitionError):
            at_quiz.select_answer("E")

    def test_invalid_transition_is_a_validation_error(self) -> None:
        """Surfaces as HTTP 400 through the ServiceError handler."""
        assert issubclass(InvalidTransitionError, ValidationError)
        assert InvalidTransitionError("x").status_code == 400

    def test_retry_restarts_at_flashcards(self, at_quiz: LearningProgress) -> None:
        for letter in "ABCDA":
            at_quiz.select_answer(letter)

        at_quiz.retry()

        assert at_quiz.state == ViewState.FLASHCARD
        assert at_quiz.current_index == 0
        assert at_quiz.answers == []

    def test_retry_only_from_results(self, at_quiz: LearningProgress) -> None:
        with pytest.raises(InvalidTransitionError):
            at_quiz.retry()


class TestTimer:
    def test_tick_counts_down(self, at_quiz: LearningProgress) -> None:
        at_quiz.tick(10)

        assert at_quiz.time_remaining == 290
        assert at_quiz.state == ViewState.MCQ

    def test_expiry_resubmits_last_answer(self, at_quiz: LearningProgress) -> None:
        at_quiz.select_answer("C")
        at_quiz.select_answer("B")

        at_quiz.tick(300)

        assert at_quiz.state == ViewState.RESULTS
        assert at_quiz.answers == ["C", "B", "B"]

    def test_expiry_without_answers_completes(self, at_quiz: LearningProgress) -> None:
        at_quiz.tick(1000)

        assert at_quiz.state == ViewState.RESULTS
        assert at_quiz.answers == []
        assert at_quiz.time_remaining == 0


class TestSaveForLater:
    def test_checkpoint_at_flashcard(self, at_flashcards: LearningProgress) -> None:
        at_flashcards.advance_flashcard()

        checkpoint = at_flashcards.save_for_later()

        assert checkpoint.type == ProgressType.FLASHCARDS
        assert checkpoint.index == 1
        assert checkpoint.answers == []
        assert checkpoint.topic == "Cats"

    def test_checkpoint_at_quiz(self, at_quiz: LearningProgress) -> None:
        at_quiz.select_answer("A")
        at_quiz.tick(45)

        checkpoint = at_quiz.save_for_later()

        assert checkpoint.type == ProgressType.MCQ
        assert checkpoint.index == 1
        assert checkpoint.answers == ["A"]
        assert checkpoint.time_remaining == 255

    def test_cannot_save_from_results(self, at_quiz: LearningProgress) -> None:
        for letter in "ABCDA":
            at_quiz.select_answer(letter)

        with pytest.raises(InvalidTransitionError):
            at_quiz.save_for_later()

    def test_resume_quiz(self) -> None:
        checkpoint = ProgressCheckpoint(
            type=ProgressType.MCQ, index=2, answers=["A", "B"], time_remaining=120
        )

        progress = LearningProgress.resume(checkpoint, 5, 5, time_limit=300)

        assert progress.state == ViewState.MCQ
        assert progress.current_index == 2
        progress.select_answer("C")
        assert progress.answers == ["A", "B", "C"]

    def test_resume_quiz_without_time_uses_full_limit(self) -> None:
        checkpoint = ProgressCheckpoint(type=ProgressType.MCQ, index=0)

        progress = LearningProgress.resume(checkpoint, 5, 5, time_limit=300)

        assert progress.time_remaining == 300

    @pytest.mark.parametrize(
        "checkpoint",
        [
            ProgressCheckpoint(type=ProgressType.FLASHCARDS, index=5),
            ProgressCheckpoint(type=ProgressType.FLASHCARDS, index=-1),
            ProgressCheckpoint(type=ProgressType.MCQ, index=5),
            ProgressCheckpoint(type=ProgressType.MCQ, index=0, answers=["A"] * 6),
            ProgressCheckpoint(type=ProgressType.MCQ, index=1, answers=["Z"]),
            ProgressCheckpoint(type=ProgressType.MCQ, index=1, time_remaining=0),
            ProgressCheckpoint(type=ProgressType.MCQ, index=1, time_remaining=301),
        ],
    )
    def test_resume_rejects_bad_checkpoints(
        self, checkpoint: ProgressCheckpoint
    ) -> None:
        with pytest.raises(InvalidTransitionError):
            LearningProgress.resume(checkpoint, 5, 5, time_limit=300)


class TestCheckpointJson:
    def test_payload_shape(self) -> None:
        checkpoint = ProgressCheckpoint(
            type=ProgressType.MCQ,
            index=3,
            answers=["A", None, "C"],
            time_remaining=200,
            topic="Cats",
        )

        assert checkpoint_to_json(checkpoint) == {
            "answers": ["A", None, "C"],
            "timeRemaining": 200,
            "topic": "Cats",
        }

    def test_restore_from_columns(self) -> None:
        checkpoint = checkpoint_from_json(
            "mcq", 3, {"answers": ["A", None, "C"], "timeRemaining": 200, "topic": "Cats"}
        )

        assert checkpoint.type == ProgressType.MCQ
        assert checkpoint.index == 3
        assert checkpoint.answers == ["A", None, "C"]
        assert checkpoint.time_remaining == 200

    def test_restore_with_empty_payload(self) -> None:
        checkpoint = checkpoint_from_json("flashcards", 2, None)

        assert checkpoint.type == ProgressType.FLASHCARDS
        assert checkpoint.answers == []
        assert checkpoint.time_remaining is None
