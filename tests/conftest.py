"""
Shared pytest fixtures and configuration for QuizGrader tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path so `src.` imports resolve
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.models import MatchingPair, Option, Question, QuestionType, Quiz


@pytest.fixture
def mcq_question():
    """Multiple choice question worth 10 points, correct option A."""
    return Question(
        question_id="q-mcq",
        question_text="Which planet is known as the red planet?",
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=10,
        options=(
            Option("A", "Mars", is_correct=True),
            Option("B", "Venus"),
            Option("C", "Jupiter"),
        ),
    )


@pytest.fixture
def multi_select_question():
    """Multiple choice question with two correct options (A and C)."""
    return Question(
        question_id="q-multi",
        question_text="Which of these are prime numbers?",
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=4,
        options=(
            Option("A", "2", is_correct=True),
            Option("B", "4"),
            Option("C", "7", is_correct=True),
            Option("D", "9"),
        ),
    )


@pytest.fixture
def true_false_question():
    return Question(
        question_id="q-tf",
        question_text="Water boils at 100°C at sea level.",
        question_type=QuestionType.TRUE_FALSE,
        points=2,
        options=(Option("T", "True", is_correct=True), Option("F", "False")),
    )


@pytest.fixture
def short_answer_question():
    """Short answer worth 5 points accepting 'Paris', case-insensitive."""
    return Question(
        question_id="q-short",
        question_text="What is the capital of France?",
        question_type=QuestionType.SHORT_ANSWER,
        points=5,
        acceptable_answers=("Paris",),
    )


@pytest.fixture
def fill_in_question():
    return Question(
        question_id="q-fill",
        question_text="H2O is the chemical formula for ____.",
        question_type=QuestionType.FILL_IN_BLANK,
        points=3,
        acceptable_answers=("water", "H2O"),
        case_sensitive=True,
    )


@pytest.fixture
def matching_question():
    return Question(
        question_id="q-match",
        question_text="Match each country to its capital.",
        question_type=QuestionType.MATCHING,
        points=6,
        matching_pairs=(
            MatchingPair("Kenya", "Nairobi"),
            MatchingPair("Peru", "Lima"),
            MatchingPair("Japan", "Tokyo"),
        ),
    )


@pytest.fixture
def essay_question():
    """Essay worth 20 points with a 5-word minimum."""
    return Question(
        question_id="q-essay",
        question_text="Describe the water cycle.",
        question_type=QuestionType.ESSAY,
        points=20,
        essay_prompt="Mention evaporation and condensation.",
        min_words=5,
    )


@pytest.fixture
def mixed_quiz(
    mcq_question,
    true_false_question,
    short_answer_question,
    fill_in_question,
    matching_question,
    essay_question,
):
    """Quiz with one question of every type (46 points total)."""
    return Quiz(
        quiz_id="quiz-mixed",
        title="Mixed Quiz",
        questions=(
            mcq_question,
            true_false_question,
            short_answer_question,
            fill_in_question,
            matching_question,
            essay_question,
        ),
        passing_score=70,
        time_limit_minutes=10,
    )


@pytest.fixture
def valid_quiz_dict():
    """
    Fixture providing a valid quiz definition in its JSON shape.

    Returns:
        dict: A quiz that passes schema and authoring validation
    """
    return {
        "quiz_id": "quiz-science-01",
        "title": "Science Basics",
        "passing_score": 60,
        "time_limit_minutes": 20,
        "questions": [
            {
                "question_id": "q1",
                "question_text": "Which gas do plants absorb?",
                "question_type": "multiple_choice",
                "points": 5,
                "options": [
                    {"option_id": "A", "text": "Oxygen", "is_correct": False},
                    {"option_id": "B", "text": "Carbon dioxide", "is_correct": True},
                ],
            },
            {
                "question_id": "q2",
                "question_text": "The closest star to Earth is the ____.",
                "question_type": "fill_in_blank",
                "points": 5,
                "acceptable_answers": ["Sun"],
            },
            {
                "question_id": "q3",
                "question_text": "Explain photosynthesis.",
                "question_type": "essay",
                "points": 10,
                "min_words": 30,
            },
        ],
    }


@pytest.fixture
def temp_schema_file(tmp_path):
    """
    Fixture providing a temporary schema file for testing.

    Returns:
        Path: Path to temporary schema file
    """
    schema = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": {"test": {"type": "string"}},
        "required": ["test"],
        "additionalProperties": False,
    }

    schema_file = tmp_path / "test.schema.json"
    with open(schema_file, "w") as f:
        json.dump(schema, f)

    return schema_file


class FakeClock:
    """Deterministic clock for attempt timing tests."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        from datetime import timedelta

        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fake_clock():
    from datetime import datetime, timezone

    return FakeClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark tests in unit/ directory as unit tests
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Mark tests in integration/ directory as integration tests
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
