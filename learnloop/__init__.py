"""LearnLoop: AI-generated flashcards, quizzes and weekly learning digests."""

__version__ = "0.1.0"
