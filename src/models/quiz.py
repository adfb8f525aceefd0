"""
Quiz definition model - questions, options and correctness criteria.

Definitions are immutable values: a quiz is authored once, validated, and then
read (never modified) by attempts and by the scoring engine.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

try:
    from ..config import config
except ImportError:
    from src.config import config


def _whole_number(value: Any) -> Any:
    """Turn whole-number floats from JSON (e.g. 10.0) into ints; leave anything else as is."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class QuestionType(str, Enum):
    """Question types, valued as stored by the backend."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    FILL_IN_BLANK = "fill_in_blank"
    MATCHING = "matching"
    ESSAY = "essay"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_choice(self) -> bool:
        """Answered by selecting options."""
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)

    @property
    def is_text(self) -> bool:
        """Answered with a short free-text string checked against accepted answers."""
        return self in (QuestionType.SHORT_ANSWER, QuestionType.FILL_IN_BLANK)

    @property
    def is_auto_gradable(self) -> bool:
        """Matching and essay answers are always deferred to a human grader."""
        return self not in (QuestionType.MATCHING, QuestionType.ESSAY)


_DISPLAY_NAMES = {
    QuestionType.MULTIPLE_CHOICE: "Multiple Choice",
    QuestionType.TRUE_FALSE: "True / False",
    QuestionType.SHORT_ANSWER: "Short Answer",
    QuestionType.FILL_IN_BLANK: "Fill in the Blank",
    QuestionType.MATCHING: "Matching",
    QuestionType.ESSAY: "Essay",
}


@dataclass(frozen=True)
class Option:
    """A selectable option on a multiple choice or true/false question."""

    option_id: str
    text: str
    is_correct: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"option_id": self.option_id, "text": self.text, "is_correct": self.is_correct}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        return cls(
            option_id=str(data["option_id"]),
            text=data.get("text", ""),
            is_correct=bool(data.get("is_correct", False)),
        )


@dataclass(frozen=True)
class MatchingPair:
    """Left-hand prompt and its correct right-hand answer."""

    prompt: str
    answer: str

    def to_dict(self) -> Dict[str, Any]:
        return {"prompt": self.prompt, "answer": self.answer}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchingPair":
        return cls(prompt=data.get("prompt", ""), answer=data.get("answer", ""))


@dataclass(frozen=True)
class Question:
    """
    A single gradable question.

    Attributes:
        question_id: Unique identifier within the quiz
        question_text: The question text
        question_type: Type of question
        points: Points this question is worth (positive integer)
        options: Ordered options (multiple_choice / true_false)
        acceptable_answers: Accepted strings (short_answer / fill_in_blank)
        case_sensitive: Whether accepted answers must match letter case
        matching_pairs: Prompt/answer pairs (matching)
        essay_prompt: Additional instructions (essay)
        min_words: Minimum word count guidance (essay, informational)
        explanation: Shown to the learner after grading
    """

    question_id: str
    question_text: str
    question_type: QuestionType
    points: int = 1
    options: Tuple[Option, ...] = ()
    acceptable_answers: Tuple[str, ...] = ()
    case_sensitive: bool = False
    matching_pairs: Tuple[MatchingPair, ...] = ()
    essay_prompt: str = ""
    min_words: int = 0
    explanation: Optional[str] = None

    def __post_init__(self):
        # Accept plain strings and lists from callers; store enum and tuples
        object.__setattr__(self, "question_type", QuestionType(self.question_type))
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "acceptable_answers", tuple(self.acceptable_answers))
        object.__setattr__(self, "matching_pairs", tuple(self.matching_pairs))

    @property
    def correct_option_ids(self) -> frozenset:
        """Ids of every option flagged correct."""
        return frozenset(opt.option_id for opt in self.options if opt.is_correct)

    @property
    def option_ids(self) -> Tuple[str, ...]:
        return tuple(opt.option_id for opt in self.options)

    @property
    def needs_manual_review(self) -> bool:
        return not self.question_type.is_auto_gradable

    def validate(self) -> None:
        """
        Validate question integrity.

        Raises:
            ValueError: If validation fails
        """
        if not self.question_text or not self.question_text.strip():
            raise ValueError(f"Question {self.question_id} must have non-empty text")

        # bool is an int subclass; reject it explicitly
        if not isinstance(self.points, int) or isinstance(self.points, bool):
            raise ValueError(
                f"Question {self.question_id} points must be an integer, got {self.points!r}"
            )
        if self.points <= 0 or self.points > config.scoring.max_question_points:
            raise ValueError(
                f"Question {self.question_id} points must be between 1 and "
                f"{config.scoring.max_question_points}, got {self.points}"
            )

        qtype = self.question_type

        if qtype.is_choice:
            min_options = config.scoring.min_choice_options
            if len(self.options) < min_options:
                raise ValueError(
                    f"{qtype.display_name} question {self.question_id} must have at least "
                    f"{min_options} options, got {len(self.options)}"
                )
            if any(not opt.text.strip() for opt in self.options):
                raise ValueError(f"Question {self.question_id} has a blank option")
            if len(set(self.option_ids)) != len(self.options):
                raise ValueError(f"Question {self.question_id} has duplicate option ids")

            correct = self.correct_option_ids
            if not correct:
                raise ValueError(
                    f"Question {self.question_id} must have at least one correct option"
                )
            if qtype is QuestionType.TRUE_FALSE:
                if len(self.options) != 2:
                    raise ValueError(
                        f"True/False question {self.question_id} must have exactly 2 options"
                    )
                if len(correct) != 1:
                    raise ValueError(
                        f"True/False question {self.question_id} must have exactly one correct option"
                    )

        elif qtype.is_text:
            if not self.acceptable_answers:
                raise ValueError(
                    f"Question {self.question_id} must list at least one acceptable answer"
                )
            if any(not answer.strip() for answer in self.acceptable_answers):
                raise ValueError(f"Question {self.question_id} has a blank acceptable answer")

        elif qtype is QuestionType.MATCHING:
            min_pairs = config.scoring.min_matching_pairs
            if len(self.matching_pairs) < min_pairs:
                raise ValueError(
                    f"Matching question {self.question_id} must have at least {min_pairs} pairs, "
                    f"got {len(self.matching_pairs)}"
                )
            for pair in self.matching_pairs:
                if not pair.prompt.strip() or not pair.answer.strip():
                    raise ValueError(
                        f"Matching question {self.question_id} has a blank prompt or answer"
                    )

        elif qtype is QuestionType.ESSAY:
            if self.min_words < 0:
                raise ValueError(
                    f"Essay question {self.question_id} min_words cannot be negative: {self.min_words}"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for persistence."""
        data: Dict[str, Any] = {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "question_type": self.question_type.value,
            "points": self.points,
        }
        if self.question_type.is_choice:
            data["options"] = [opt.to_dict() for opt in self.options]
        elif self.question_type.is_text:
            data["acceptable_answers"] = list(self.acceptable_answers)
            data["case_sensitive"] = self.case_sensitive
        elif self.question_type is QuestionType.MATCHING:
            data["matching_pairs"] = [pair.to_dict() for pair in self.matching_pairs]
        elif self.question_type is QuestionType.ESSAY:
            data["essay_prompt"] = self.essay_prompt
            data["min_words"] = self.min_words
        if self.explanation is not None:
            data["explanation"] = self.explanation
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Build a question from its dictionary form (no validation)."""
        qtype = QuestionType(data["question_type"])
        min_words = data.get("min_words")
        if min_words is None:
            min_words = config.scoring.default_essay_min_words if qtype is QuestionType.ESSAY else 0
        return cls(
            question_id=data.get("question_id") or f"q-{uuid.uuid4()}",
            question_text=data.get("question_text", ""),
            question_type=qtype,
            points=_whole_number(data.get("points", 1)),
            options=tuple(Option.from_dict(opt) for opt in data.get("options") or []),
            acceptable_answers=tuple(data.get("acceptable_answers") or []),
            case_sensitive=bool(
                data.get("case_sensitive", config.scoring.case_sensitive_default)
            ),
            matching_pairs=tuple(
                MatchingPair.from_dict(pair) for pair in data.get("matching_pairs") or []
            ),
            essay_prompt=data.get("essay_prompt", ""),
            min_words=_whole_number(min_words),
            explanation=data.get("explanation"),
        )


@dataclass(frozen=True)
class Quiz:
    """
    An ordered collection of graded questions with a passing threshold.

    Attributes:
        quiz_id: Quiz identifier
        title: Display title
        questions: Ordered questions
        passing_score: Percentage (0-100) required to pass
        time_limit_minutes: Optional countdown shown while taking the quiz
    """

    quiz_id: str
    title: str = ""
    questions: Tuple[Question, ...] = ()
    passing_score: float = field(default_factory=lambda: config.scoring.default_passing_score)
    time_limit_minutes: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "questions", tuple(self.questions))

    @property
    def total_points(self) -> int:
        """Sum of all question points, independent of any answers."""
        return sum(q.points for q in self.questions)

    @property
    def question_ids(self) -> Tuple[str, ...]:
        return tuple(q.question_id for q in self.questions)

    @property
    def has_manual_review_questions(self) -> bool:
        return any(q.needs_manual_review for q in self.questions)

    def get_question(self, question_id: str) -> Optional[Question]:
        """Find a question by id, or None."""
        return next((q for q in self.questions if q.question_id == question_id), None)

    def validate(self) -> None:
        """
        Validate the quiz and every question in it.

        Raises:
            ValueError: If validation fails
        """
        if not (0 <= self.passing_score <= 100):
            raise ValueError(f"passing_score must be in [0, 100], got {self.passing_score}")

        if self.time_limit_minutes is not None and self.time_limit_minutes <= 0:
            raise ValueError(
                f"time_limit_minutes must be positive when set, got {self.time_limit_minutes}"
            )

        seen = set()
        for question in self.questions:
            if question.question_id in seen:
                raise ValueError(f"Duplicate question id: {question.question_id}")
            seen.add(question.question_id)
            question.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for persistence."""
        return {
            "quiz_id": self.quiz_id,
            "title": self.title,
            "passing_score": self.passing_score,
            "time_limit_minutes": self.time_limit_minutes,
            "questions": [q.to_dict() for q in self.questions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        """Build a quiz from its dictionary form (no validation)."""
        passing_score = data.get("passing_score")
        if passing_score is None:
            passing_score = config.scoring.default_passing_score
        return cls(
            quiz_id=data.get("quiz_id") or f"quiz-{uuid.uuid4()}",
            title=data.get("title", ""),
            questions=tuple(Question.from_dict(q) for q in data.get("questions") or []),
            passing_score=passing_score,
            time_limit_minutes=_whole_number(data.get("time_limit_minutes")),
        )


def build_quiz(
    quiz_id: str,
    questions: Iterable[Question],
    passing_score: Optional[float] = None,
    title: str = "",
    time_limit_minutes: Optional[int] = None,
    validate: bool = True,
) -> Quiz:
    """
    Assemble and (by default) validate a quiz.

    Raises:
        ValueError: If validate is True and the quiz is malformed
    """
    quiz = Quiz(
        quiz_id=quiz_id,
        title=title,
        questions=tuple(questions),
        passing_score=(
            config.scoring.default_passing_score if passing_score is None else passing_score
        ),
        time_limit_minutes=time_limit_minutes,
    )
    if validate:
        quiz.validate()
    return quiz
