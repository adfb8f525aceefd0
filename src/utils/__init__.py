"""
Utility modules for QuizGrader.

This module contains utility functions:
- validation: JSON Schema validation of quiz definitions and answer sheets
"""

from .validation import (
    AnswerSheetValidator,
    QuizValidator,
    SchemaValidator,
    ValidationResult,
    load_answers,
    load_quiz,
    validate_answer_sheet,
    validate_quiz,
)

__all__ = [
    # Validation
    "ValidationResult",
    "SchemaValidator",
    "QuizValidator",
    "AnswerSheetValidator",
    "validate_quiz",
    "validate_answer_sheet",
    # Loading
    "load_quiz",
    "load_answers",
]
