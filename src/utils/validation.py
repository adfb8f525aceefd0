"""
Schema validation utilities for QuizGrader.

Provides JSON Schema validation of quiz definitions and answer sheets with
clear error messages and optional automatic repair of common problems.

Features:
- Deep copy to prevent mutations
- Type coercion (numeric strings to numbers)
- Removal of unknown keys
- Generated ids for questions that lack one
- Authoring checks (options, accepted answers, matching pairs)
- Transparent repair tracking
"""

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

try:
    from ..config import config
    from ..models.answers import SubmittedAnswer
    from ..models.exceptions import AnswerSheetError, QuizDefinitionError
    from ..models.quiz import Question, Quiz
except ImportError:
    from src.config import config
    from src.models.answers import SubmittedAnswer
    from src.models.exceptions import AnswerSheetError, QuizDefinitionError
    from src.models.quiz import Question, Quiz

logger = logging.getLogger(__name__)


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The validated data (may be modified if repair was attempted)
        repairs: List of repairs applied (for transparency)
    """

    def __init__(
        self,
        valid: bool,
        errors: list[str],
        data: Any = None,
        repairs: Optional[list[str]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.repairs = repairs or []

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.valid:
            msg = "✓ Validation passed"
            if self.repairs:
                msg += f" (with {len(self.repairs)} repair(s))"
            return msg
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class SchemaValidator:
    """
    JSON Schema validator with auto-repair capabilities.

    Usage:
        validator = SchemaValidator("path/to/schema.json")
        result = validator.validate(data)
        if not result:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        """
        Initialize validator with a schema file.

        Args:
            schema_path: Path to JSON Schema file
        """
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: dict, auto_repair: bool = False) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate
            auto_repair: If True, attempt to fix common validation errors

        Returns:
            ValidationResult with validation status and any errors
        """
        errors = [self._format_error(error) for error in self.validator.iter_errors(data)]

        if errors:
            if auto_repair and isinstance(data, dict):
                repaired_data, repairs = self._attempt_repair(data)
                result = self.validate(repaired_data, auto_repair=False)
                result.repairs = repairs
                return result
            return ValidationResult(valid=False, errors=errors, data=data)

        return ValidationResult(valid=True, errors=[], data=data)

    def _format_error(self, error: ValidationError) -> str:
        """
        Convert ValidationError to human-readable message with details.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message with validator and schema path
        """
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        validator_name = getattr(error, "validator", "unknown")
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={validator_name}, schema_path=/{schema_path}]"
        )

    def _attempt_repair(self, data: dict) -> tuple[dict, list[str]]:
        """
        Attempt to automatically fix common validation errors.

        Returns:
            Tuple of (repaired data, list of repairs applied)
        """
        # Deep copy to prevent mutation of original
        repaired = deepcopy(data)
        repairs: list[str] = []
        self._strip_additional_props(repaired, self.schema, repairs)
        return repaired, repairs

    def _resolve(self, schema: dict) -> dict:
        """Follow a local '#/definitions/...' reference."""
        ref = schema.get("$ref") if isinstance(schema, dict) else None
        if not ref or not ref.startswith("#/"):
            return schema
        node: Any = self.schema
        for part in ref[2:].split("/"):
            node = node[part]
        return node

    def _strip_additional_props(
        self, obj: Any, schema: dict, repairs: list[str], path: str = "root"
    ):
        """
        Recursively remove keys not allowed by schema (additionalProperties: false).
        Handles both objects and arrays.
        """
        schema = self._resolve(schema)
        if not isinstance(schema, dict):
            return

        if isinstance(obj, dict) and "properties" in schema:
            allowed = set(schema.get("properties", {}).keys())
            if schema.get("additionalProperties") is False:
                extra_keys = [k for k in list(obj.keys()) if k not in allowed]
                for k in extra_keys:
                    obj.pop(k, None)
                    repairs.append(f"Removed unknown key '{k}' at {path}")

            for k, subschema in schema.get("properties", {}).items():
                if k in obj:
                    self._strip_additional_props(obj[k], subschema, repairs, f"{path}.{k}")

        if isinstance(obj, list) and "items" in schema:
            for i, item in enumerate(obj):
                self._strip_additional_props(item, schema["items"], repairs, f"{path}[{i}]")


def _safe_number(value: Any, as_int: bool) -> Any:
    try:
        number = float(value)
    except (ValueError, TypeError):
        return value
    if as_int:
        return int(number) if number.is_integer() else value
    return int(number) if number.is_integer() else number


class QuizValidator(SchemaValidator):
    """
    Validator for quiz definitions with authoring checks.

    Features:
    - JSON Schema validation
    - Per-question authoring rules (options, accepted answers, pairs)
    - Unique question ids
    - Auto-repair: unknown keys, numeric strings, missing ids
    """

    NUMERIC_QUIZ_FIELDS = {"passing_score": False, "time_limit_minutes": True}
    NUMERIC_QUESTION_FIELDS = {"points": True, "min_words": True}

    def __init__(self, schema_path: Optional[Path | str] = None):
        super().__init__(schema_path or config.paths.quiz_schema)

    def validate(self, data: dict, auto_repair: bool = False) -> ValidationResult:
        """
        Validate a quiz definition.

        Args:
            data: Quiz dictionary
            auto_repair: Whether to attempt automatic repairs

        Returns:
            ValidationResult
        """
        result = super().validate(data, auto_repair=auto_repair)
        if not result.valid:
            return result

        authoring_errors = self._authoring_errors(result.data)
        return ValidationResult(
            valid=not authoring_errors,
            errors=authoring_errors,
            data=result.data,
            repairs=result.repairs,
        )

    def _attempt_repair(self, data: dict) -> tuple[dict, list[str]]:
        repaired, repairs = super()._attempt_repair(data)

        self._coerce_fields(repaired, self.NUMERIC_QUIZ_FIELDS, "quiz", repairs)

        if not repaired.get("quiz_id"):
            repaired["quiz_id"] = "quiz-unnamed"
            repairs.append("Added quiz_id = quiz-unnamed")

        questions = repaired.get("questions")
        if isinstance(questions, list):
            used_ids = {q.get("question_id") for q in questions if isinstance(q, dict)}
            for i, question in enumerate(questions, start=1):
                if not isinstance(question, dict):
                    continue
                self._coerce_fields(
                    question, self.NUMERIC_QUESTION_FIELDS, f"question {i}", repairs
                )
                if not question.get("question_id"):
                    new_id = f"q{i:02d}"
                    while new_id in used_ids:
                        new_id += "-x"
                    used_ids.add(new_id)
                    question["question_id"] = new_id
                    repairs.append(f"Generated question ID: {new_id}")

        return repaired, repairs

    def _coerce_fields(self, obj: dict, fields: Dict[str, bool], label: str, repairs: list[str]):
        """Coerce numeric strings (e.g. "10" -> 10) for the given fields."""
        for name, as_int in fields.items():
            value = obj.get(name)
            if isinstance(value, str):
                coerced = _safe_number(value, as_int)
                if coerced != value:
                    obj[name] = coerced
                    repairs.append(f"Coerced {label} {name}: '{value}' → {coerced}")

    def _authoring_errors(self, data: dict) -> list[str]:
        errors = []
        seen = set()
        for question_data in data.get("questions", []):
            question_id = question_data.get("question_id")
            if question_id in seen:
                errors.append(f"Duplicate question id: {question_id}")
            seen.add(question_id)
            try:
                Question.from_dict(question_data).validate()
            except ValueError as e:
                errors.append(str(e))
        return errors


class AnswerSheetValidator(SchemaValidator):
    """Validator for submitted answer sheets."""

    def __init__(self, schema_path: Optional[Path | str] = None):
        super().__init__(schema_path or config.paths.answers_schema)


# Convenience functions for quick validation
def validate_quiz(data: dict, auto_repair: bool = False) -> ValidationResult:
    """
    Quick validation of a quiz definition.

    Example:
        result = validate_quiz(quiz_dict)
        if not result:
            print("Errors:", result.errors)
    """
    return QuizValidator().validate(data, auto_repair=auto_repair)


def validate_answer_sheet(data: dict) -> ValidationResult:
    """Quick validation of an answer sheet ({"answers": {question_id: answer}})."""
    return AnswerSheetValidator().validate(data)


def load_quiz(data: dict, auto_repair: bool = False) -> Quiz:
    """
    Validate a quiz definition and build the Quiz.

    Raises:
        QuizDefinitionError: If the definition is invalid
    """
    result = validate_quiz(data, auto_repair=auto_repair)
    for repair in result.repairs:
        logger.info("Quiz repair: %s", repair)
    if not result.valid:
        raise QuizDefinitionError(
            f"Invalid quiz definition ({len(result.errors)} error(s))", errors=result.errors
        )

    quiz = Quiz.from_dict(result.data)
    try:
        quiz.validate()
    except ValueError as e:
        raise QuizDefinitionError("Invalid quiz definition", errors=[str(e)]) from e
    return quiz


def load_answers(data: dict) -> Dict[str, SubmittedAnswer]:
    """
    Validate an answer sheet and build the answers mapping.

    Raises:
        AnswerSheetError: If the sheet does not match the schema
    """
    result = validate_answer_sheet(data)
    if not result.valid:
        raise AnswerSheetError(
            f"Invalid answer sheet ({len(result.errors)} error(s))", errors=result.errors
        )
    return {
        question_id: SubmittedAnswer.from_dict(answer)
        for question_id, answer in data["answers"].items()
    }
