"""
Sample Learning Content

Static, topic-parameterized flashcards, questions and quiz feedback used
when the generative service is unavailable. Output is deterministic for a
given topic except for the freshly generated item ids.
"""

import uuid

from learnloop.enums.learning import AnswerOption
from learnloop.models.learning import FlashcardItem, MCQItem, QuizFeedback


_FLASHCARD_TEMPLATES: list[tuple[str, str]] = [
    (
        "Overview",
        "<p>This is a flashcard with an overview about <strong>{topic}</strong>. "
        "The content is coming from a local sample source because the "
        "generative service is unavailable or has reached its quota limit.</p>\n"
        "<p>These sample flashcards will help you learn the basics about this "
        "topic while the service connection is restored.</p>",
    ),
    (
        "Key Concepts",
        "<p>Here are some key concepts related to <strong>{topic}</strong>:</p>\n"
        "<ul>\n"
        "  <li>Concept 1: Understanding the fundamentals</li>\n"
        "  <li>Concept 2: Learning intermediate techniques</li>\n"
        "  <li>Concept 3: Advanced applications</li>\n"
        "</ul>\n"
        "<p>Note: This is sample content. Personalized learning materials are "
        "generated when the service is available.</p>",
    ),
    (
        "Practical Applications",
        "<p>Here are some common applications of <strong>{topic}</strong>:</p>\n"
        "<ul>\n"
        "  <li>Application in education</li>\n"
        "  <li>Professional use cases</li>\n"
        "  <li>Everyday applications</li>\n"
        "</ul>\n"
        "<p>This sample content is provided when the generative service is "
        "unavailable.</p>",
    ),
    (
        "Historical Context",
        "<p>The history of <strong>{topic}</strong> includes several important "
        "milestones:</p>\n"
        "<ul>\n"
        "  <li>Early development and origins</li>\n"
        "  <li>Major advancements over time</li>\n"
        "  <li>Current state and future directions</li>\n"
        "</ul>\n"
        "<p>This is sample content provided when personalized content is "
        "unavailable.</p>",
    ),
    (
        "Learning Resources",
        "<p>If you want to learn more about <strong>{topic}</strong>, here are "
        "some suggested resources:</p>\n"
        "<ul>\n"
        "  <li>Books and academic papers</li>\n"
        "  <li>Online courses and tutorials</li>\n"
        "  <li>Communities and forums</li>\n"
        "</ul>\n"
        "<p>This is sample content. Personalized content is generated when "
        "the service is available.</p>",
    ),
]

_MCQ_TEMPLATES: list[tuple[str, list[str], AnswerOption]] = [
    (
        "Which of the following best describes a fundamental aspect of {topic}?",
        [
            "Understanding core principles",
            "Ignoring basic concepts",
            "Focusing only on advanced techniques",
            "Skipping the learning process",
        ],
        AnswerOption.A,
    ),
    (
        "When studying {topic}, what approach is generally most effective?",
        [
            "Memorizing without understanding",
            "Learning through practical application",
            "Reading without taking notes",
            "Focusing only on theory",
        ],
        AnswerOption.B,
    ),
    (
        "Which resource would likely be most helpful for beginners learning about {topic}?",
        [
            "Advanced research papers",
            "Complex technical documentation",
            "Introductory tutorials and guides",
            "Expert-level workshops",
        ],
        AnswerOption.C,
    ),
    (
        "What is a common challenge when mastering {topic}?",
        [
            "Building foundational knowledge",
            "Finding beginner resources",
            "Understanding theoretical concepts",
            "Applying knowledge to real-world situations",
        ],
        AnswerOption.D,
    ),
    (
        "What aspect of {topic} typically requires the most practice?",
        [
            "Practical implementation skills",
            "Reading about the topic",
            "Watching tutorial videos",
            "Discussing with others",
        ],
        AnswerOption.A,
    ),
]


def get_sample_flashcards(topic: str) -> list[FlashcardItem]:
    """Five fixed flashcards with the topic interpolated."""
    return [
        FlashcardItem(
            id=str(uuid.uuid4()), title=title, content=content.format(topic=topic)
        )
        for title, content in _FLASHCARD_TEMPLATES
    ]


def get_sample_mcqs(topic: str) -> list[MCQItem]:
    """Five fixed questions with the topic interpolated. Answers are A, B, C, D, A."""
    return [
        MCQItem(
            id=str(uuid.uuid4()),
            question=question.format(topic=topic),
            options=list(options),
            correct_answer=answer,
        )
        for question, options, answer in _MCQ_TEMPLATES
    ]


def get_sample_feedback(score_percentage: int) -> QuizFeedback:
    """Static feedback keyed only by the score band (>= 80, >= 60, below)."""
    if score_percentage >= 80:
        return QuizFeedback(
            strengths=(
                "You demonstrated a strong understanding of the concepts covered "
                "in this quiz. Your answers show you've mastered the fundamental "
                "principles of the topic."
            ),
            improvements=(
                "There is little to correct here. Review any question you missed "
                "to make sure the reasoning behind the correct answer is clear."
            ),
            next_steps=(
                "You're ready for more advanced material. Try exploring related "
                "topics or applying what you've learned to a practical project."
            ),
        )
    if score_percentage >= 60:
        return QuizFeedback(
            strengths=(
                "You demonstrated a good understanding of the basic concepts "
                "covered in this quiz. Your answers show you've grasped the "
                "fundamental principles of the topic."
            ),
            improvements=(
                "There are some areas where you might benefit from more practice, "
                "particularly in applying the concepts to specific situations. "
                "Consider reviewing the questions you missed."
            ),
            next_steps=(
                "To further improve your understanding, try exploring more "
                "advanced topics or practical applications. Consider seeking out "
                "additional learning resources or practicing with more complex "
                "examples."
            ),
        )
    return QuizFeedback(
        strengths=(
            "You've made a start on this topic, and attempting the quiz is a "
            "useful way to find out what you already know."
        ),
        improvements=(
            "Several core concepts still need work. Go back through the "
            "flashcards and focus on the ideas behind the questions you missed."
        ),
        next_steps=(
            "Revisit the fundamentals with introductory tutorials and guides, "
            "then take the quiz again to measure your progress."
        ),
    )
