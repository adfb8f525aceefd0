"""
Quiz Scoring Engine - grades a snapshot of submitted answers against a quiz.

Scoring is a pure computation: no I/O, no shared state, and the same inputs
always produce an equal ScoreResult. Choice and text questions are graded
automatically; matching and essay questions are flagged for manual review
and earn nothing until a teacher grades them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

try:
    from .answers import SubmittedAnswer
    from .quiz import Question, QuestionType, Quiz
except ImportError:
    from src.models.answers import SubmittedAnswer
    from src.models.quiz import Question, QuestionType, Quiz

logger = logging.getLogger(__name__)


class GradingStatus(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PENDING_MANUAL_REVIEW = "pending_manual_review"


@dataclass(frozen=True)
class QuestionOutcome:
    """
    Grading verdict for one question.

    Attributes:
        question_id: Question identifier
        question_type: Type of question
        status: correct / incorrect / pending_manual_review
        points_possible: Points the question is worth
        points_earned: Points awarded automatically (0 unless correct)
        answered: Whether a complete answer of the right shape was given
            (non-blank; for matching, every prompt has a selection)
        word_count: Essay word count (essays only)
        meets_min_words: Essay completeness indicator (essays only, informational)
    """

    question_id: str
    question_type: QuestionType
    status: GradingStatus
    points_possible: int
    points_earned: int = 0
    answered: bool = False
    word_count: Optional[int] = None
    meets_min_words: Optional[bool] = None

    @property
    def is_correct(self) -> Optional[bool]:
        """None while the question awaits manual review."""
        if self.status is GradingStatus.PENDING_MANUAL_REVIEW:
            return None
        return self.status is GradingStatus.CORRECT

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "question_id": self.question_id,
            "question_type": self.question_type.value,
            "status": self.status.value,
            "points_possible": self.points_possible,
            "points_earned": self.points_earned,
            "answered": self.answered,
        }
        if self.word_count is not None:
            data["word_count"] = self.word_count
            data["meets_min_words"] = self.meets_min_words
        return data


@dataclass(frozen=True)
class ScoreResult:
    """
    Output of one scoring pass.

    Attributes:
        earned_points: Points awarded automatically
        total_points: Sum of every question's points
        percentage: floor(earned / total * 100), 0 when total is 0
        passed: percentage >= passing_score
        passing_score: Threshold the quiz was scored against
        outcomes: Per-question breakdown, in quiz order
    """

    earned_points: int
    total_points: int
    percentage: int
    passed: bool
    passing_score: float
    outcomes: Tuple[QuestionOutcome, ...] = ()

    @property
    def has_pending_review(self) -> bool:
        return any(o.status is GradingStatus.PENDING_MANUAL_REVIEW for o in self.outcomes)

    @property
    def pending_review_ids(self) -> Tuple[str, ...]:
        return tuple(
            o.question_id for o in self.outcomes if o.status is GradingStatus.PENDING_MANUAL_REVIEW
        )

    @property
    def correct_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status is GradingStatus.CORRECT)

    @property
    def incorrect_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status is GradingStatus.INCORRECT)

    @property
    def auto_gradable_points(self) -> int:
        """Points available from questions graded automatically."""
        return sum(
            o.points_possible
            for o in self.outcomes
            if o.status is not GradingStatus.PENDING_MANUAL_REVIEW
        )

    @property
    def auto_graded_percentage(self) -> int:
        """
        Provisional percentage over auto-gradable questions only.

        Shown to learners while manual review is outstanding; the official
        percentage still counts pending questions in its denominator.
        """
        return _floor_percentage(self.earned_points, self.auto_gradable_points)

    def get_outcome(self, question_id: str) -> Optional[QuestionOutcome]:
        return next((o for o in self.outcomes if o.question_id == question_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "earned_points": self.earned_points,
            "total_points": self.total_points,
            "percentage": self.percentage,
            "passed": self.passed,
            "passing_score": self.passing_score,
            "has_pending_review": self.has_pending_review,
            "pending_review_ids": list(self.pending_review_ids),
            "auto_graded_percentage": self.auto_graded_percentage,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def _floor_percentage(earned: int, total: int) -> int:
    # Integer arithmetic keeps boundaries exact (7/10 is 70, not 69.99...)
    if total <= 0:
        return 0
    return (earned * 100) // total


def count_words(text: Optional[str]) -> int:
    """Number of whitespace-delimited words; empty or None is 0."""
    if not text:
        return 0
    return len(text.split())


def normalize_text_answer(text: str, case_sensitive: bool) -> str:
    """Trim surrounding whitespace and, unless case sensitive, fold case."""
    text = text.strip()
    return text if case_sensitive else text.casefold()


class QuizScoringEngine:
    """
    Scores a quiz submission.

    Usage:
        engine = QuizScoringEngine()
        result = engine.score(quiz, {"q1": SubmittedAnswer.for_choices(["A"])})
        if result.passed:
            ...

    Rules:
    - multiple_choice / true_false: correct iff the selected option ids equal
      the correct option ids exactly (as sets)
    - short_answer / fill_in_blank: trimmed answer equals any accepted answer,
      case-insensitive unless the question is case sensitive
    - matching / essay: always pending manual review, 0 points earned
    """

    def score(self, quiz: Quiz, answers: Mapping[str, SubmittedAnswer]) -> ScoreResult:
        """
        Grade every question and aggregate the result.

        Args:
            quiz: Quiz definition
            answers: Submitted answers keyed by question id. Ids not in the
                quiz are ignored; missing ids count as unanswered.

        Returns:
            ScoreResult
        """
        unknown = set(answers) - set(quiz.question_ids)
        if unknown:
            logger.debug(
                "Ignoring answers for unknown questions in quiz %s: %s",
                quiz.quiz_id,
                sorted(unknown),
            )

        outcomes = tuple(self.grade_question(q, answers.get(q.question_id)) for q in quiz.questions)

        total = quiz.total_points
        earned = sum(o.points_earned for o in outcomes)
        percentage = _floor_percentage(earned, total)
        passed = percentage >= quiz.passing_score

        logger.debug(
            "Scored quiz %s: %d/%d points (%d%%), passed=%s",
            quiz.quiz_id,
            earned,
            total,
            percentage,
            passed,
        )

        return ScoreResult(
            earned_points=earned,
            total_points=total,
            percentage=percentage,
            passed=passed,
            passing_score=quiz.passing_score,
            outcomes=outcomes,
        )

    def grade_question(
        self, question: Question, answer: Optional[SubmittedAnswer]
    ) -> QuestionOutcome:
        """Grade one question in isolation."""
        # An answer of the wrong shape is treated as no answer at all
        if answer is not None and not answer.fits(question.question_type):
            logger.debug(
                "Answer for question %s has shape %s, expected %s; treating as unanswered",
                question.question_id,
                answer.kind.value,
                question.question_type.value,
            )
            answer = None

        answered = answer is not None and answer.is_complete_for(question)
        qtype = question.question_type

        # Missing, blank and empty-selection answers are all incorrect
        if qtype.is_choice:
            is_correct = answered and self._check_choices(question, answer)
        elif qtype.is_text:
            is_correct = answered and self._check_text(question, answer)
        elif qtype is QuestionType.ESSAY:
            words = count_words(answer.response_text if answer is not None else None)
            return QuestionOutcome(
                question_id=question.question_id,
                question_type=qtype,
                status=GradingStatus.PENDING_MANUAL_REVIEW,
                points_possible=question.points,
                answered=answered,
                word_count=words,
                meets_min_words=question.min_words <= 0 or words >= question.min_words,
            )
        else:
            return QuestionOutcome(
                question_id=question.question_id,
                question_type=qtype,
                status=GradingStatus.PENDING_MANUAL_REVIEW,
                points_possible=question.points,
                answered=answered,
            )

        return QuestionOutcome(
            question_id=question.question_id,
            question_type=qtype,
            status=GradingStatus.CORRECT if is_correct else GradingStatus.INCORRECT,
            points_possible=question.points,
            points_earned=question.points if is_correct else 0,
            answered=answered,
        )

    def _check_choices(self, question: Question, answer: SubmittedAnswer) -> bool:
        # Exact set equality: no extra, no missing selections
        return answer.selected_option_ids == question.correct_option_ids

    def _check_text(self, question: Question, answer: SubmittedAnswer) -> bool:
        submitted = normalize_text_answer(answer.response_text, question.case_sensitive)
        return any(
            submitted == normalize_text_answer(accepted, question.case_sensitive)
            for accepted in question.acceptable_answers
        )


_default_engine = QuizScoringEngine()


def score_quiz(quiz: Quiz, answers: Mapping[str, SubmittedAnswer]) -> ScoreResult:
    """Convenience wrapper around QuizScoringEngine.score."""
    return _default_engine.score(quiz, answers)
