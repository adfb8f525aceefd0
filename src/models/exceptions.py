"""Exceptions raised around quiz definitions and attempts."""

from __future__ import annotations

from typing import List, Optional


class QuizError(Exception):
    """Base class for quiz errors."""


class QuizDefinitionError(QuizError, ValueError):
    """
    A quiz definition failed schema or authoring validation.

    Attributes:
        errors: Every validation message collected for the definition
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + "\n" + "\n".join(f"  - {error}" for error in self.errors)


class AttemptClosedError(QuizError):
    """The attempt has already been submitted."""


class IncompleteAttemptError(QuizError):
    """Submission was requested before all required questions were answered."""

    def __init__(self, message: str, unanswered_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.unanswered_ids = list(unanswered_ids or [])


class AnswerSheetError(QuizError, ValueError):
    """An answer sheet payload did not match the expected shape."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])
