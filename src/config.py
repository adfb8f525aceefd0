"""
Configuration management for QuizGrader.

This module centralizes all configuration settings following 12-factor app principles:
- Defaults loaded from environment variables
- Sensible defaults for development
- Type hints for IDE support
- Single source of truth for all settings
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Load environment variables from .env file
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass  # dotenv is optional


@dataclass
class ScoringConfig:
    """Quiz scoring and authoring defaults."""

    # Pass threshold applied when a quiz definition omits one
    default_passing_score: float = field(
        default_factory=lambda: float(os.getenv("QUIZ_PASSING_SCORE", "70"))
    )

    # Essay guidance (informational only, never affects the score)
    default_essay_min_words: int = field(
        default_factory=lambda: int(os.getenv("ESSAY_MIN_WORDS", "50"))
    )

    # Authoring limits
    max_question_points: int = 100
    min_choice_options: int = 2
    min_matching_pairs: int = 2

    # Text answers are compared case-insensitively unless a question opts in
    case_sensitive_default: bool = False


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    # Base paths
    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)

    # Schema files (computed from project_root)
    schemas_dir: Path = field(init=False)
    quiz_schema: Path = field(init=False)
    answers_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.schemas_dir = self.project_root / "schemas"
        self.quiz_schema = self.schemas_dir / "quiz.schema.json"
        self.answers_schema = self.schemas_dir / "answers.schema.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from src.config import config

        # Access settings
        threshold = config.scoring.default_passing_score
        schema = config.paths.quiz_schema

        # Configure logging (call once from your entrypoint)
        config.configure_logging()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.scoring = ScoringConfig()
            cls._instance.logging = LoggingConfig()

        return cls._instance

    def configure_logging(self, level: Optional[str] = None):
        """
        Apply logging settings to the root logger.

        The library never installs handlers on import; entrypoints call this.
        """
        logging.basicConfig(
            level=(level or self.logging.log_level).upper(),
            format=self.logging.log_format,
        )

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        # Scoring validation
        if not (0 <= self.scoring.default_passing_score <= 100):
            errors.append(
                f"default_passing_score must be in [0, 100], got {self.scoring.default_passing_score}"
            )

        if self.scoring.default_essay_min_words < 0:
            errors.append(
                f"default_essay_min_words must be >= 0, got {self.scoring.default_essay_min_words}"
            )

        if self.scoring.max_question_points <= 0:
            errors.append(
                f"max_question_points must be > 0, got {self.scoring.max_question_points}"
            )

        if self.scoring.min_choice_options < 2:
            errors.append(
                f"min_choice_options must be >= 2, got {self.scoring.min_choice_options}"
            )

        # Logging validation
        if not isinstance(logging.getLevelName(self.logging.log_level.upper()), int):
            errors.append(f"Unknown log level: {self.logging.log_level}")

        # Path validation
        for schema_path in (self.paths.quiz_schema, self.paths.answers_schema):
            if not schema_path.exists():
                errors.append(f"Schema not found: {schema_path}")

        return errors


# Global config instance
config = Config()
