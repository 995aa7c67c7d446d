"""
Boundary validators for configuration values and ruleset records.

Parse at the boundary: anything that comes from the environment, a CLI flag,
an HTTP body or a ruleset file is checked here before it reaches the engine.
Every failure raises ConfigurationError with a field-specific message.
"""

import logging
import re
from typing import Any

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


def validate_positive_int(value: Any, field_name: str = "number") -> int:
    """Validate that a value is a positive integer (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"{field_name} must be an integer (got {type(value).__name__})"
        )
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be positive (got {value})")
    return value


def parse_positive_int(raw: str, field_name: str = "number") -> int:
    """Parse a string (environment variable, CLI text) into a positive integer."""
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"{field_name} must be an integer (got '{raw}')"
        ) from None
    return validate_positive_int(value, field_name)


def validate_bool(value: Any, field_name: str = "flag") -> bool:
    """Validate a real boolean; strings such as "false" are rejected."""
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"{field_name} must be true or false (got {value!r})"
        )
    return value


def validate_identifier(value: Any, field_name: str = "identifier") -> str:
    """Validate a lowercase kebab/snake identifier such as a pattern id."""
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
        raise ConfigurationError(
            f"{field_name} must start with a lowercase letter and contain only "
            f"lowercase letters, numbers, underscores, and hyphens (got {value!r})"
        )
    return value


def validate_in_choices(value: Any, choices: list[str], field_name: str = "value") -> str:
    """Validate that a value is one of the allowed choices."""
    if value not in choices:
        raise ConfigurationError(f"{field_name} must be one of: {', '.join(choices)}")
    return value


def validate_question_list(items: Any, field_name: str = "questions") -> list[str]:
    """Validate a non-empty list of non-empty question strings."""
    if not isinstance(items, list) or not items:
        raise ConfigurationError(f"{field_name} must be a non-empty list")
    for item in items:
        if not isinstance(item, str) or not item.strip():
            raise ConfigurationError(f"{field_name} entries must be non-empty strings")
    logger.debug(f"[Validators] {field_name}: {len(items)} question(s) accepted")
    return [item.strip() for item in items]
