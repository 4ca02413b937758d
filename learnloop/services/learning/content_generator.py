"""
Content Generator Service

Produces the learning materials for a topic and the feedback for a
completed quiz.

Materials:
- 5-10 flashcards, each a title plus an HTML content fragment
- Exactly 5 multiple-choice questions with 4 options and a correct
  letter A-D

The flashcard and question prompts run concurrently. Both responses
must parse and satisfy the shape above; if either call fails for any
reason, both are discarded and the topic-parameterized sample set is
returned instead with using_sample_data=True. Mixing generated
flashcards with sample questions never happens.

Results:
- Scoring is positional and never depends on the generator
- Strengths / improvements / next steps come from the generator, or
  from static feedback keyed by the score band when the session is
  already on sample data or the call fails

Usage:
    from learnloop.services.learning.content_generator import ContentGenerator

    generator = ContentGenerator(get_text_generator())
    materials = await generator.generate_materials("Photosynthesis")
    results = await generator.generate_results(
        topic, materials.mcqs, ["A", "B", None], materials.using_sample_data
    )
"""

import asyncio
import json
import logging
import math
import uuid
from typing import Any, Optional, Sequence

from learnloop.enums.learning import AnswerOption
from learnloop.enums.llm import LLMOperation
from learnloop.middleware.error_handling import LLMError
from learnloop.models.learning import (
    FlashcardItem,
    GeneratedMaterials,
    MCQItem,
    QuizFeedback,
    ResultsResponse,
)
from learnloop.services.learning.sample_data import (
    get_sample_feedback,
    get_sample_flashcards,
    get_sample_mcqs,
)
from learnloop.services.llm.client import TextGenerator

logger = logging.getLogger(__name__)

MIN_FLASHCARDS = 5
MAX_FLASHCARDS = 10
MCQ_COUNT = 5
OPTIONS_PER_MCQ = 4


FLASHCARD_PROMPT = """Create a set of 5-10 educational flashcards on the topic "{topic}".
Each flashcard should have a title and content with educational information.
Make the content rich and educational, including examples, explanations, and key concepts.
Include HTML formatting for better readability (use <p>, <ul>, <li>, <pre>, <code>, etc.).

Format your response as a JSON object that follows this structure:
{{
  "flashcards": [
    {{
      "title": "Flashcard Title",
      "content": "Flashcard content with <html> formatting"
    }}
  ]
}}"""


MCQ_PROMPT = """Create a set of 5 multiple-choice questions (MCQs) to test knowledge on the topic "{topic}".
Each question should have 4 options, with exactly one correct answer.
Make the questions diverse and cover different aspects of the topic.
Vary the difficulty level, with some easier questions and some more challenging ones.

Format your response as a JSON object that follows this structure:
{{
  "mcqs": [
    {{
      "question": "Question text",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": "A"
    }}
  ]
}}
correctAnswer is the letter (A, B, C or D) of the correct option."""


RESULTS_PROMPT = """I've just completed a learning session on "{topic}".
My test results:
- Score: {score_percentage}% ({correct_answers} out of {total_questions} correct)

Here are the questions and my answers:
{answered_questions}

Based on this performance, please provide:
1. A brief analysis of my strengths (what I understood well)
2. Areas where I need improvement
3. Recommended next steps for continued learning on this topic

Format your response as a JSON object with the following structure:
{{
  "strengths": "analysis of what I did well",
  "improvements": "areas where I need to improve",
  "nextSteps": "specific recommendations for continued learning"
}}"""


# ===========================================
# Scoring
# ===========================================


def round_half_up(value: float) -> int:
    """Round .5 upwards (62.5 -> 63), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def count_correct_answers(
    mcqs: Sequence[MCQItem], selected_answers: Sequence[Optional[str]]
) -> int:
    """
    Positional comparison of selected letters against correct letters.

    An index with no selection (None or beyond the end of
    selected_answers) counts as incorrect.
    """
    correct = 0
    for i, mcq in enumerate(mcqs):
        if i < len(selected_answers) and selected_answers[i] == mcq.correct_answer:
            correct += 1
    return correct


def score_percentage(correct_answers: int, total_questions: int) -> int:
    if total_questions == 0:
        return 0
    return round_half_up(correct_answers / total_questions * 100)


# ===========================================
# Response Parsing
# ===========================================


def _load_json_object(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise LLMError(f"Malformed JSON from generator: {e}")
    if not isinstance(data, dict):
        raise LLMError("Generator response is not a JSON object")
    return data


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_flashcards(text: str) -> list[FlashcardItem]:
    """Parse and validate a flashcard response. Each card gets a new id."""
    items = _load_json_object(text).get("flashcards")
    if not isinstance(items, list):
        raise LLMError("Flashcard response has no 'flashcards' list")
    if not MIN_FLASHCARDS <= len(items) <= MAX_FLASHCARDS:
        raise LLMError(
            f"Expected {MIN_FLASHCARDS}-{MAX_FLASHCARDS} flashcards, got {len(items)}"
        )

    flashcards = []
    for item in items:
        if not isinstance(item, dict):
            raise LLMError("Flashcard entry is not an object")
        title, content = item.get("title"), item.get("content")
        if not (_non_empty_str(title) and _non_empty_str(content)):
            raise LLMError("Flashcard is missing a title or content")
        flashcards.append(
            FlashcardItem(id=str(uuid.uuid4()), title=title, content=content)
        )
    return flashcards


def parse_mcqs(text: str) -> list[MCQItem]:
    """Parse and validate a question response. Each question gets a new id."""
    items = _load_json_object(text).get("mcqs")
    if not isinstance(items, list):
        raise LLMError("Question response has no 'mcqs' list")
    if len(items) != MCQ_COUNT:
        raise LLMError(f"Expected {MCQ_COUNT} questions, got {len(items)}")

    letters = {option.value for option in AnswerOption}
    mcqs = []
    for item in items:
        if not isinstance(item, dict):
            raise LLMError("Question entry is not an object")
        question = item.get("question")
        options = item.get("options")
        answer = item.get("correctAnswer")
        if not _non_empty_str(question):
            raise LLMError("Question text is missing")
        if (
            not isinstance(options, list)
            or len(options) != OPTIONS_PER_MCQ
            or not all(_non_empty_str(o) for o in options)
        ):
            raise LLMError(f"Question must have {OPTIONS_PER_MCQ} text options")
        if not isinstance(answer, str) or answer.strip().upper() not in letters:
            raise LLMError(f"Invalid correct answer letter: {answer!r}")
        mcqs.append(
            MCQItem(
                id=str(uuid.uuid4()),
                question=question,
                options=options,
                correct_answer=AnswerOption(answer.strip().upper()),
            )
        )
    return mcqs


def parse_feedback(text: str) -> QuizFeedback:
    data = _load_json_object(text)
    fields = {}
    for key, attr in (
        ("strengths", "strengths"),
        ("improvements", "improvements"),
        ("nextSteps", "next_steps"),
    ):
        value = data.get(key)
        if isinstance(value, list):
            value = " ".join(str(v) for v in value)
        if not _non_empty_str(value):
            raise LLMError(f"Feedback response is missing '{key}'")
        fields[attr] = value
    return QuizFeedback(**fields)


# ===========================================
# Service
# ===========================================


class ContentGenerator:
    """Generates learning materials and quiz feedback for a topic."""

    def __init__(self, generator: Optional[TextGenerator] = None):
        """
        Args:
            generator: Text generator. None means the generative service is
                unavailable and sample content is always used.
        """
        self.generator = generator

    async def _generate_flashcards(self, topic: str) -> list[FlashcardItem]:
        text = await self.generator.generate(
            FLASHCARD_PROMPT.format(topic=topic),
            operation=LLMOperation.FLASHCARD_GENERATION,
        )
        return parse_flashcards(text)

    async def _generate_mcqs(self, topic: str) -> list[MCQItem]:
        text = await self.generator.generate(
            MCQ_PROMPT.format(topic=topic),
            operation=LLMOperation.MCQ_GENERATION,
        )
        return parse_mcqs(text)

    def sample_materials(self, topic: str) -> GeneratedMaterials:
        return GeneratedMaterials(
            flashcards=get_sample_flashcards(topic),
            mcqs=get_sample_mcqs(topic),
            using_sample_data=True,
        )

    async def generate_materials(self, topic: str) -> GeneratedMaterials:
        """
        Generate flashcards and questions for a topic.

        The two requests are issued concurrently and treated as a unit:
        a failure of either yields the sample set for both.
        """
        if self.generator is None:
            logger.info(f"Generator unavailable, using sample content for '{topic}'")
            return self.sample_materials(topic)

        flashcards, mcqs = await asyncio.gather(
            self._generate_flashcards(topic),
            self._generate_mcqs(topic),
            return_exceptions=True,
        )

        for result in (flashcards, mcqs):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    f"Content generation failed for '{topic}', using sample content: "
                    f"{type(result).__name__}: {result}"
                )
                return self.sample_materials(topic)

        logger.info(
            f"Generated {len(flashcards)} flashcards and {len(mcqs)} questions "
            f"for '{topic}'"
        )
        return GeneratedMaterials(flashcards=flashcards, mcqs=mcqs)

    async def generate_results(
        self,
        topic: str,
        mcqs: Sequence[MCQItem],
        selected_answers: Sequence[Optional[str]],
        using_sample_data: bool = False,
    ) -> ResultsResponse:
        """
        Score a quiz and attach feedback.

        Args:
            topic: Topic of the session
            mcqs: Questions in the order they were shown
            selected_answers: Letters chosen, positionally aligned with mcqs
            using_sample_data: The session is already on sample content; skip
                the generator and use static feedback

        Returns:
            ResultsResponse with score == correct_answers and the percentage
            rounded half-up
        """
        correct = count_correct_answers(mcqs, selected_answers)
        total = len(mcqs)
        percentage = score_percentage(correct, total)

        feedback = None
        if not using_sample_data and self.generator is not None:
            try:
                feedback = await self._generate_feedback(
                    topic, mcqs, selected_answers, correct, percentage
                )
            except Exception as e:
                logger.warning(f"Feedback generation failed for '{topic}': {e}")
        if feedback is None:
            feedback = get_sample_feedback(percentage)

        return ResultsResponse(
            score=correct,
            score_percentage=percentage,
            correct_answers=correct,
            total_questions=total,
            strengths=feedback.strengths,
            improvements=feedback.improvements,
            next_steps=feedback.next_steps,
        )

    async def _generate_feedback(
        self,
        topic: str,
        mcqs: Sequence[MCQItem],
        selected_answers: Sequence[Optional[str]],
        correct: int,
        percentage: int,
    ) -> QuizFeedback:
        lines = []
        for i, mcq in enumerate(mcqs):
            answer = selected_answers[i] if i < len(selected_answers) else None
            verdict = "Correct" if answer == mcq.correct_answer else "Incorrect"
            lines.append(
                f"Q{i + 1}: {mcq.question}\n"
                f"My answer: {answer or 'No answer'} ({verdict})\n"
                f"Correct answer: {mcq.correct_answer.value}"
            )

        prompt = RESULTS_PROMPT.format(
            topic=topic,
            score_percentage=percentage,
            correct_answers=correct,
            total_questions=len(mcqs),
            answered_questions="\n\n".join(lines),
        )
        text = await self.generator.generate(
            prompt, operation=LLMOperation.RESULT_FEEDBACK
        )
        return parse_feedback(text)
