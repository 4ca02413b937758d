#!/usr/bin/env python3
"""
Database Seed Script

Creates a small topic catalog and one sample learning session
("Introduction to Python Programming") with flashcards and questions.

Setup:
    1. Ensure PostgreSQL is running
    2. Copy .env.example to .env and fill in the POSTGRES_* settings

Usage:
    python scripts/seed_db.py
    python scripts/seed_db.py --skip-session   # catalog only
"""

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
load_dotenv(project_root / ".env")

from sqlalchemy import select  # noqa: E402

from learnloop.db.base import async_session_maker, init_db  # noqa: E402
from learnloop.db.models import Category, LearningPath, Topic  # noqa: E402
from learnloop.db.models_learning import (  # noqa: E402
    Flashcard,
    LearningSession,
    MCQuestion,
)

logger = logging.getLogger(__name__)

CATALOG = {
    "Programming": {
        "description": "Languages, tools and software design",
        "topics": [
            ("Python Basics", 90),
            ("Data Structures", 80),
            ("Algorithms", 75),
            ("Web Development", 70),
            ("Databases", 60),
            ("Version Control with Git", 50),
        ],
        "path": ("Python from Scratch", "Variables to classes in ten steps"),
    },
    "Science": {
        "description": "Natural sciences",
        "topics": [
            ("Photosynthesis", 85),
            ("Cell Biology", 70),
            ("Newton's Laws", 65),
            ("Periodic Table", 55),
            ("Plate Tectonics", 40),
        ],
        "path": ("Foundations of Biology", "From cells to ecosystems"),
    },
    "History": {
        "description": "World and regional history",
        "topics": [
            ("Ancient Rome", 80),
            ("The Renaissance", 70),
            ("Industrial Revolution", 60),
            ("World War II", 75),
        ],
        "path": None,
    },
}

PYTHON_FLASHCARDS = [
    (
        "Variables and Data Types",
        "<p>In Python, variables are created when you assign a value to them "
        "using the equal sign (=):</p>"
        "<pre><code>name = \"John\"  # String\nage = 25  # Integer\n"
        "height = 1.85  # Float\nis_student = True  # Boolean</code></pre>"
        "<p>Python is dynamically typed: you don't declare a variable's type "
        "when you create it.</p>",
    ),
    (
        "Control Flow",
        "<p>Python uses indentation to define blocks of code:</p>"
        "<pre><code>if condition:\n    ...\nelif other_condition:\n    ...\n"
        "else:\n    ...</code></pre>"
        "<p>Loops use <code>for item in sequence:</code> and "
        "<code>while condition:</code>.</p>",
    ),
    (
        "Functions",
        "<p>Functions are defined with the <code>def</code> keyword:</p>"
        "<pre><code>def greet(name):\n    return f\"Hello, {name}!\"\n\n"
        "message = greet(\"Alice\")</code></pre>"
        "<p>Functions can have default parameters and return multiple values.</p>",
    ),
]

PYTHON_MCQS = [
    (
        "Which of the following is NOT a built-in data type in Python?",
        ["Array", "Dictionary", "List", "Tuple"],
        "A",
    ),
    (
        "What will be the output of the following code: print(3 * 'abc')?",
        ["9", "abcabcabc", "Error", "abc3"],
        "B",
    ),
    (
        "Which of the following is a valid way to comment in Python?",
        ["/* comment */", "// comment", "# comment", "<!-- comment -->"],
        "C",
    ),
    (
        "What does the 'len()' function do in Python?",
        [
            "Returns the length of a string, list, or other sequence",
            "Calculates the absolute value of a number",
            "Returns the largest number in a list",
            "Rounds a floating-point number",
        ],
        "A",
    ),
    (
        "How do you create a list in Python?",
        ["list = (1, 2, 3)", "list = [1, 2, 3]", "list = {1, 2, 3}", "list = <1, 2, 3>"],
        "B",
    ),
]


async def seed_catalog(db) -> int:
    """Insert missing categories, topics and paths. Returns categories added."""
    added = 0
    for name, spec in CATALOG.items():
        result = await db.execute(select(Category).where(Category.name == name))
        if result.scalar_one_or_none() is not None:
            logger.info(f"Category '{name}' already exists, skipping")
            continue

        category = Category(name=name, description=spec["description"])
        category.topics = [
            Topic(name=topic, popularity=popularity)
            for topic, popularity in spec["topics"]
        ]
        db.add(category)
        await db.flush()

        if spec["path"]:
            path_name, path_description = spec["path"]
            db.add(
                LearningPath(
                    category_id=category.id,
                    name=path_name,
                    description=path_description,
                )
            )
        added += 1
    return added


async def seed_python_session(db) -> str:
    session_id = str(uuid.uuid4())
    db.add(LearningSession(id=session_id, topic="Introduction to Python Programming"))
    await db.flush()

    for position, (title, content) in enumerate(PYTHON_FLASHCARDS):
        db.add(
            Flashcard(
                session_id=session_id, position=position, title=title, content=content
            )
        )
    for position, (question, options, answer) in enumerate(PYTHON_MCQS):
        db.add(
            MCQuestion(
                session_id=session_id,
                position=position,
                question=question,
                options=options,
                correct_answer=answer,
            )
        )
    await db.flush()
    return session_id


async def main(skip_session: bool) -> None:
    await init_db()
    async with async_session_maker() as db:
        added = await seed_catalog(db)
        print(f"✅ Added {added} categories")

        if not skip_session:
            session_id = await seed_python_session(db)
            print(f"✅ Created sample session {session_id}")

        await db.commit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the LearnLoop database")
    parser.add_argument(
        "--skip-session",
        action="store_true",
        help="Only seed the topic catalog",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(main(args.skip_session))
