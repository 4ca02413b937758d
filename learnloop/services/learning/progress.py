"""
Learning Session Progress

Server-side model of the learner's pass through a session:

    topic_input → loading → flashcard → mcq → results

- flashcard → mcq after advancing past the last flashcard; the quiz
  timer starts at QUIZ_TIME_LIMIT_SECONDS and the answer list is cleared
- mcq → results after the last question is answered, or when the timer
  expires (the most recently selected answer, if any, is resubmitted for
  the current question and the quiz completes)
- results → flashcard on retry

"Save for later" is a side exit from flashcard or mcq that produces a
ProgressCheckpoint without completing the session. resume() rebuilds
the state from a checkpoint and rejects checkpoints that don't fit the
session's materials, which is how POST /api/learning/save-progress
validates its input.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from learnloop.config import settings
from learnloop.enums.learning import AnswerOption, ProgressType, ViewState
from learnloop.middleware.error_handling import ValidationError

MIN_TOPIC_LENGTH = 2


class InvalidTransitionError(ValidationError):
    """Operation not allowed in the current state, or a bad checkpoint."""

    error_code = "invalid_transition"


@dataclass
class ProgressCheckpoint:
    """
    Save-for-later marker.

    Attributes:
        type: Where the learner stopped.
        index: Zero-based flashcard or question index.
        answers: Letters selected so far (mcq only), positional.
        time_remaining: Seconds left on the quiz timer (mcq only).
        topic: Topic of the session, echoed for the dashboard.
    """

    type: ProgressType
    index: int
    answers: list[Optional[str]] = field(default_factory=list)
    time_remaining: Optional[int] = None
    topic: Optional[str] = None


def checkpoint_to_json(checkpoint: ProgressCheckpoint) -> dict[str, Any]:
    """
    Serialize the payload stored in LearningSession.progress_data.

    type and index live in their own columns.
    """
    return {
        "answers": list(checkpoint.answers),
        "timeRemaining": checkpoint.time_remaining,
        "topic": checkpoint.topic,
    }


def checkpoint_from_json(
    progress_type: str, progress_index: int, data: Optional[dict[str, Any]]
) -> ProgressCheckpoint:
    """Rebuild a checkpoint from the stored columns."""
    data = data or {}
    return ProgressCheckpoint(
        type=ProgressType(progress_type),
        index=progress_index,
        answers=list(data.get("answers") or []),
        time_remaining=data.get("timeRemaining"),
        topic=data.get("topic"),
    )


class LearningProgress:
    """State machine for one learning session."""

    def __init__(self, time_limit: Optional[int] = None):
        self.time_limit = time_limit or settings.QUIZ_TIME_LIMIT_SECONDS
        self.state = ViewState.TOPIC_INPUT
        self.topic: Optional[str] = None
        self.flashcard_count = 0
        self.mcq_count = 0
        self.current_index = 0
        self.answers: list[Optional[str]] = []
        self.time_remaining: Optional[int] = None

    def _require(self, *states: ViewState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransitionError(
                f"Cannot do this in state '{self.state.value}' (expected {allowed})"
            )

    def _start_quiz(self) -> None:
        self.state = ViewState.MCQ
        self.current_index = 0
        self.answers = []
        self.time_remaining = self.time_limit

    def _record_answer(self, letter: Optional[str]) -> None:
        while len(self.answers) <= self.current_index:
            self.answers.append(None)
        self.answers[self.current_index] = letter

    def begin(self, topic: str) -> None:
        self._require(ViewState.TOPIC_INPUT)
        topic = (topic or "").strip()
        if len(topic) < MIN_TOPIC_LENGTH:
            raise InvalidTransitionError(
                f"Topic must be at least {MIN_TOPIC_LENGTH} characters"
            )
        self.topic = topic
        self.state = ViewState.LOADING

    def materials_loaded(self, flashcard_count: int, mcq_count: int) -> None:
        self._require(ViewState.LOADING)
        if flashcard_count < 1 or mcq_count < 1:
            raise InvalidTransitionError("A session needs flashcards and questions")
        self.flashcard_count = flashcard_count
        self.mcq_count = mcq_count
        self.current_index = 0
        self.state = ViewState.FLASHCARD

    def advance_flashcard(self) -> None:
        self._require(ViewState.FLASHCARD)
        if self.current_index < self.flashcard_count - 1:
            self.current_index += 1
        else:
            self._start_quiz()

    def select_answer(self, letter: str) -> None:
        self._require(ViewState.MCQ)
        if letter not in {option.value for option in AnswerOption}:
            raise InvalidTransitionError(f"Invalid answer: {letter!r}")
        self._record_answer(letter)
        if self.current_index < self.mcq_count - 1:
            self.current_index += 1
        else:
            self.state = ViewState.RESULTS

    def tick(self, seconds: int = 1) -> None:
        """Advance the quiz timer; on expiry the quiz completes."""
        self._require(ViewState.MCQ)
        self.time_remaining = max(0, self.time_remaining - seconds)
        if self.time_remaining > 0:
            return

        selected = [a for a in self.answers if a is not None]
        if selected:
            self._record_answer(selected[-1])
        self.state = ViewState.RESULTS

    def retry(self) -> None:
        """Go through the same materials again."""
        self._require(ViewState.RESULTS)
        self.current_index = 0
        self.answers = []
        self.time_remaining = None
        self.state = ViewState.FLASHCARD

    def save_for_later(self) -> ProgressCheckpoint:
        self._require(ViewState.FLASHCARD, ViewState.MCQ)
        if self.state == ViewState.FLASHCARD:
            return ProgressCheckpoint(
                type=ProgressType.FLASHCARDS,
                index=self.current_index,
                topic=self.topic,
            )
        return ProgressCheckpoint(
            type=ProgressType.MCQ,
            index=self.current_index,
            answers=list(self.answers),
            time_remaining=self.time_remaining,
            topic=self.topic,
        )

    @classmethod
    def resume(
        cls,
        checkpoint: ProgressCheckpoint,
        flashcard_count: int,
        mcq_count: int,
        time_limit: Optional[int] = None,
    ) -> "LearningProgress":
        """
        Rebuild the state a checkpoint describes.

        Raises:
            InvalidTransitionError: The checkpoint doesn't fit a session
                with the given number of flashcards and questions.
        """
        progress = cls(time_limit=time_limit)
        progress.topic = checkpoint.topic
        progress.flashcard_count = flashcard_count
        progress.mcq_count = mcq_count

        if checkpoint.type == ProgressType.FLASHCARDS:
            if not 0 <= checkpoint.index < flashcard_count:
                raise InvalidTransitionError(
                    f"Flashcard index {checkpoint.index} out of range "
                    f"(session has {flashcard_count})"
                )
            progress.state = ViewState.FLASHCARD
            progress.current_index = checkpoint.index
            return progress

        if not 0 <= checkpoint.index < mcq_count:
            raise InvalidTransitionError(
                f"Question index {checkpoint.index} out of range "
                f"(session has {mcq_count})"
            )
        if len(checkpoint.answers) > mcq_count:
            raise InvalidTransitionError(
                f"{len(checkpoint.answers)} answers for {mcq_count} questions"
            )
        letters = {option.value for option in AnswerOption}
        for answer in checkpoint.answers:
            if answer is not None and answer not in letters:
                raise InvalidTransitionError(f"Invalid answer: {answer!r}")

        time_remaining = checkpoint.time_remaining
        if time_remaining is None:
            time_remaining = progress.time_limit
        if not 0 < time_remaining <= progress.time_limit:
            raise InvalidTransitionError(
                f"Time remaining must be between 1 and {progress.time_limit} seconds"
            )

        progress.state = ViewState.MCQ
        progress.current_index = checkpoint.index
        progress.answers = list(checkpoint.answers)
        progress.time_remaining = time_remaining
        return progress
