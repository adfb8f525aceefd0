"""
Data models for quiz scoring.

This module contains core data models:
- Quiz, Question: Immutable quiz definitions
- SubmittedAnswer: A learner's answer to one question
- QuizScoringEngine, ScoreResult: Auto-grading and manual-review flagging
- QuizAttempt: In-progress answers, time limit and submission
"""

from .answers import AnswerKind, SubmittedAnswer
from .exceptions import (
    AnswerSheetError,
    AttemptClosedError,
    IncompleteAttemptError,
    QuizDefinitionError,
    QuizError,
)
from .quiz import MatchingPair, Option, Question, QuestionType, Quiz, build_quiz
from .quiz_session import QuizAttempt
from .scoring import (
    GradingStatus,
    QuestionOutcome,
    QuizScoringEngine,
    ScoreResult,
    count_words,
    score_quiz,
)

__all__ = [
    # Definitions
    "QuestionType",
    "Option",
    "MatchingPair",
    "Question",
    "Quiz",
    "build_quiz",
    # Answers
    "AnswerKind",
    "SubmittedAnswer",
    # Scoring
    "GradingStatus",
    "QuestionOutcome",
    "ScoreResult",
    "QuizScoringEngine",
    "score_quiz",
    "count_words",
    # Attempts
    "QuizAttempt",
    # Errors
    "QuizError",
    "QuizDefinitionError",
    "AnswerSheetError",
    "AttemptClosedError",
    "IncompleteAttemptError",
]
