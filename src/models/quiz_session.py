"""
Quiz Attempt - a learner's in-progress answers for one quiz.

Holds the mutable answer state while the quiz is being taken, tracks the
optional time limit, and scores an immutable snapshot on submission.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

try:
    from .answers import SubmittedAnswer
    from .exceptions import AttemptClosedError, IncompleteAttemptError
    from .quiz import Question, QuestionType, Quiz
    from .scoring import QuizScoringEngine, ScoreResult
except ImportError:
    from src.models.answers import SubmittedAnswer
    from src.models.exceptions import AttemptClosedError, IncompleteAttemptError
    from src.models.quiz import Question, QuestionType, Quiz
    from src.models.scoring import QuizScoringEngine, ScoreResult

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizAttempt:
    """
    One learner's attempt at a quiz.

    Features:
    - Select / toggle options, enter text, fill matching slots
    - Count answered questions and check submission readiness
    - Informational countdown when the quiz has a time limit
    - Score a snapshot of the answers on submit
    """

    def __init__(
        self,
        quiz: Quiz,
        learner_id: Optional[str] = None,
        attempt_id: Optional[str] = None,
        engine: Optional[QuizScoringEngine] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize attempt.

        Args:
            quiz: Quiz being taken
            learner_id: Learner taking the quiz
            attempt_id: Attempt ID (auto-generated if None)
            engine: Scoring engine (default engine if None)
            clock: Returns the current UTC time (injectable for tests)
        """
        self.quiz = quiz
        self.learner_id = learner_id
        self.attempt_id = attempt_id or f"qa-{uuid.uuid4()}"
        self.engine = engine or QuizScoringEngine()
        self._clock = clock or _utcnow

        self.started_at: datetime = self._clock()
        self.completed_at: Optional[datetime] = None
        self.status = "in_progress"
        self.result: Optional[ScoreResult] = None

        self._answers: Dict[str, SubmittedAnswer] = {}

    # ------------------------------------------------------------------
    # Answer state
    # ------------------------------------------------------------------

    @property
    def answers(self) -> Dict[str, SubmittedAnswer]:
        """Snapshot of the current answers."""
        return dict(self._answers)

    def get_answer(self, question_id: str) -> Optional[SubmittedAnswer]:
        return self._answers.get(question_id)

    def select_option(self, question_id: str, option_id: str) -> SubmittedAnswer:
        """Single-select: replace any previous selection with option_id."""
        question = self._require_question(question_id, choice=True)
        self._require_option(question, option_id)
        return self._store(question_id, SubmittedAnswer.for_choices([option_id]))

    def toggle_option(self, question_id: str, option_id: str) -> SubmittedAnswer:
        """Multi-select: add option_id, or remove it if already selected."""
        question = self._require_question(question_id, choice=True)
        self._require_option(question, option_id)

        current = self._answers.get(question_id)
        selected = set(current.selected_option_ids) if current is not None else set()
        selected.symmetric_difference_update({option_id})
        return self._store(question_id, SubmittedAnswer.for_choices(selected))

    def set_text(self, question_id: str, text: str) -> SubmittedAnswer:
        """Set the free-text answer of a short answer, fill-in or essay question."""
        question = self._require_question(question_id)
        if not (question.question_type.is_text or question.question_type is QuestionType.ESSAY):
            raise ValueError(
                f"Question {question_id} is {question.question_type.value}, not a text question"
            )
        return self._store(question_id, SubmittedAnswer.for_text(text))

    def set_match(self, question_id: str, slot: int, answer: str) -> SubmittedAnswer:
        """Choose the answer for one prompt (slot) of a matching question."""
        question = self._require_question(question_id)
        if question.question_type is not QuestionType.MATCHING:
            raise ValueError(f"Question {question_id} is not a matching question")
        if not (0 <= slot < len(question.matching_pairs)):
            raise ValueError(
                f"Slot {slot} out of range for question {question_id} "
                f"({len(question.matching_pairs)} pairs)"
            )

        current = self._answers.get(question_id)
        matches = current.matches if current is not None else {}
        matches[slot] = answer
        return self._store(question_id, SubmittedAnswer.for_matching(matches))

    def clear_answer(self, question_id: str) -> None:
        self._require_question(question_id)
        self._ensure_open()
        self._answers.pop(question_id, None)

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def is_answered(self, question: Question) -> bool:
        """
        Whether a question counts as answered.

        Matching questions count only once every prompt has a selection.
        """
        answer = self._answers.get(question.question_id)
        return answer is not None and answer.is_complete_for(question)

    def answered_count(self) -> int:
        return sum(1 for q in self.quiz.questions if self.is_answered(q))

    def unanswered_required(self) -> List[str]:
        """Ids of questions that block submission (essays never block)."""
        return [
            q.question_id
            for q in self.quiz.questions
            if q.question_type is not QuestionType.ESSAY and not self.is_answered(q)
        ]

    def can_submit(self) -> bool:
        return not self.unanswered_required()

    # ------------------------------------------------------------------
    # Time limit (informational)
    # ------------------------------------------------------------------

    def elapsed_seconds(self) -> int:
        end = self.completed_at or self._clock()
        return max(0, int((end - self.started_at).total_seconds()))

    def time_remaining_seconds(self) -> Optional[int]:
        """Seconds left on the countdown, or None when the quiz is untimed."""
        if self.quiz.time_limit_minutes is None:
            return None
        return max(0, self.quiz.time_limit_minutes * 60 - self.elapsed_seconds())

    def is_time_expired(self) -> bool:
        remaining = self.time_remaining_seconds()
        return remaining is not None and remaining == 0

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, force: bool = False) -> ScoreResult:
        """
        Score the current answers and close the attempt.

        Args:
            force: Submit even if required questions are unanswered
                (e.g. when the countdown runs out)

        Returns:
            ScoreResult for the snapshot of answers

        Raises:
            AttemptClosedError: If the attempt was already submitted
            IncompleteAttemptError: If required questions are unanswered and force is False
        """
        self._ensure_open()

        missing = self.unanswered_required()
        if missing and not force:
            raise IncompleteAttemptError(
                f"{len(missing)} question(s) still need an answer", unanswered_ids=missing
            )

        result = self.engine.score(self.quiz, self.answers)

        self.completed_at = self._clock()
        self.status = "submitted"
        self.result = result

        logger.info(
            "Attempt %s submitted for quiz %s: %d%% (%s)%s",
            self.attempt_id,
            self.quiz.quiz_id,
            result.percentage,
            "passed" if result.passed else "failed",
            ", pending manual review" if result.has_pending_review else "",
        )
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert attempt to dictionary for persistence."""
        return {
            "attempt_id": self.attempt_id,
            "quiz_id": self.quiz.quiz_id,
            "learner_id": self.learner_id,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "elapsed_seconds": self.elapsed_seconds(),
            "time_limit_minutes": self.quiz.time_limit_minutes,
            "total_questions": len(self.quiz.questions),
            "answered_questions": self.answered_count(),
            "answers": {qid: answer.to_dict() for qid, answer in self._answers.items()},
            "result": self.result.to_dict() if self.result else None,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_open(self):
        if self.status != "in_progress":
            raise AttemptClosedError(f"Attempt {self.attempt_id} has already been submitted")

    def _require_question(self, question_id: str, choice: bool = False) -> Question:
        question = self.quiz.get_question(question_id)
        if question is None:
            raise ValueError(f"Question {question_id} not found in quiz")
        if choice and not question.question_type.is_choice:
            raise ValueError(
                f"Question {question_id} is {question.question_type.value}, not a choice question"
            )
        return question

    def _require_option(self, question: Question, option_id: str):
        if option_id not in question.option_ids:
            raise ValueError(
                f"Option {option_id} is not an option of question {question.question_id}"
            )

    def _store(self, question_id: str, answer: SubmittedAnswer) -> SubmittedAnswer:
        self._ensure_open()
        self._answers[question_id] = answer
        return answer
