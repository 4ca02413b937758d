"""
LearnLoop Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Test env mapping, mock DB / Redis fixtures
    ├── unit/                # No external services (mocked DB, Redis, LLM)
    └── integration/         # Real PostgreSQL test database

Running Tests:
    # Unit tests (integration tests are deselected by default)
    pytest

    # Integration tests (needs POSTGRES_TEST_* pointing at a test database)
    pytest -m integration

    # Run with coverage
    pytest --cov=learnloop --cov-report=html
"""
