"""
Submitted answers - what a learner has entered for one question.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

try:
    from .quiz import Question, QuestionType
except ImportError:
    from src.models.quiz import Question, QuestionType


class AnswerKind(str, Enum):
    """Shape of a submitted answer."""

    CHOICES = "choices"
    TEXT = "text"
    MATCHING = "matching"


@dataclass(frozen=True)
class SubmittedAnswer:
    """
    Learner's answer to a single question.

    Exactly one of the fields is set:
        selected_option_ids: Option ids chosen (multiple_choice / true_false)
        response_text: Free text (short_answer / fill_in_blank / essay)
        match_selections: (slot index, chosen answer) pairs (matching), sorted by slot
    """

    selected_option_ids: Optional[frozenset] = None
    response_text: Optional[str] = None
    match_selections: Optional[Tuple[Tuple[int, str], ...]] = None

    def __post_init__(self):
        populated = [
            value
            for value in (self.selected_option_ids, self.response_text, self.match_selections)
            if value is not None
        ]
        if len(populated) != 1:
            raise ValueError(
                "SubmittedAnswer needs exactly one of selected_option_ids, "
                "response_text or match_selections"
            )

        if self.selected_option_ids is not None:
            # A bare string would otherwise be split into one id per character
            if isinstance(self.selected_option_ids, str):
                raise TypeError(
                    "selected_option_ids must be a collection of option ids, "
                    f"not a string: {self.selected_option_ids!r}"
                )
            object.__setattr__(
                self, "selected_option_ids", frozenset(str(i) for i in self.selected_option_ids)
            )
        if self.match_selections is not None:
            selections = self.match_selections
            if isinstance(selections, Mapping):
                selections = selections.items()
            object.__setattr__(
                self,
                "match_selections",
                tuple(sorted((int(slot), str(answer)) for slot, answer in selections)),
            )

    @classmethod
    def for_choices(cls, option_ids: Iterable[str]) -> "SubmittedAnswer":
        if isinstance(option_ids, str):
            return cls(selected_option_ids=option_ids)
        return cls(selected_option_ids=frozenset(option_ids))

    @classmethod
    def for_text(cls, text: str) -> "SubmittedAnswer":
        return cls(response_text=text)

    @classmethod
    def for_matching(cls, selections: Mapping[int, str]) -> "SubmittedAnswer":
        return cls(match_selections=tuple(selections.items()))

    @property
    def kind(self) -> AnswerKind:
        if self.selected_option_ids is not None:
            return AnswerKind.CHOICES
        if self.response_text is not None:
            return AnswerKind.TEXT
        return AnswerKind.MATCHING

    @property
    def matches(self) -> Dict[int, str]:
        """Match selections as a slot -> answer mapping."""
        return dict(self.match_selections or ())

    @property
    def is_blank(self) -> bool:
        """True when the learner has not actually entered anything."""
        if self.kind is AnswerKind.CHOICES:
            return not self.selected_option_ids
        if self.kind is AnswerKind.TEXT:
            return not self.response_text.strip()
        return not any(answer.strip() for _, answer in self.match_selections)

    def is_complete_for(self, question: Question) -> bool:
        """
        Whether this answer fully answers the question.

        Matching answers are complete only once every prompt has a selection.
        """
        if self.is_blank:
            return False
        if self.kind is AnswerKind.MATCHING:
            matches = self.matches
            return all(
                matches.get(slot, "").strip() for slot in range(len(question.matching_pairs))
            )
        return True

    def fits(self, question_type: QuestionType) -> bool:
        """Whether this answer's shape is the one the question type expects."""
        question_type = QuestionType(question_type)
        if question_type.is_choice:
            return self.kind is AnswerKind.CHOICES
        if question_type is QuestionType.MATCHING:
            return self.kind is AnswerKind.MATCHING
        return self.kind is AnswerKind.TEXT

    def to_dict(self) -> Dict[str, Any]:
        if self.kind is AnswerKind.CHOICES:
            return {"selected_option_ids": sorted(self.selected_option_ids)}
        if self.kind is AnswerKind.TEXT:
            return {"response_text": self.response_text}
        # JSON object keys are strings
        return {"match_selections": {str(slot): answer for slot, answer in self.match_selections}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubmittedAnswer":
        if "selected_option_ids" in data:
            return cls.for_choices(data["selected_option_ids"])
        if "response_text" in data:
            return cls.for_text(data["response_text"])
        if "match_selections" in data:
            return cls.for_matching(
                {int(slot): answer for slot, answer in data["match_selections"].items()}
            )
        raise ValueError(f"Unrecognised answer payload: {sorted(data)}")
