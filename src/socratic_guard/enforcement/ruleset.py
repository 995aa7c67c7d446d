"""
Ruleset loader -- builds a PatternLibrary and QuestionBank from a JSON file.

Format, either a bare list of pattern records or:

    {
      "patterns": [
        {"id": "unprompted-code-block", "severity": "medium",
         "thresholds": {"code_block_line_threshold": 4}},
        {"id": "prescribed-step-list", "enabled": false}
      ],
      "questions": {
        "gave-finished-code": ["What would the first line of this look like?"]
      }
    }

Record order is registration order. Every record names a built-in rule;
category, severity and thresholds override its defaults.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import EngineConfig
from ..errors import ConfigurationError
from ..validators import (
    validate_bool,
    validate_identifier,
    validate_in_choices,
    validate_question_list,
)
from .models import Category, Severity
from .patterns import BUILTIN_RULES, PatternLibrary, build_pattern
from .question_bank import QuestionBank

logger = logging.getLogger(__name__)

RECORD_KEYS = {"id", "category", "severity", "enabled", "thresholds"}
CATEGORY_CHOICES = [c.value for c in Category]
SEVERITY_CHOICES = [s.value for s in Severity]


@dataclass(frozen=True)
class Ruleset:
    """A configured pattern library paired with its question bank."""

    library: PatternLibrary
    question_bank: QuestionBank


def load_ruleset(path: str | Path, config: EngineConfig | None = None) -> Ruleset:
    """Read a ruleset file. Raises ConfigurationError on any invalid content."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Ruleset file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Ruleset {path} is not valid JSON: {e}") from e

    ruleset = parse_ruleset(data, config)
    logger.info(
        f"[Ruleset] Loaded {len(ruleset.library)} pattern(s) from {path}"
    )
    return ruleset


def parse_ruleset(data: Any, config: EngineConfig | None = None) -> Ruleset:
    """Build a Ruleset from already-decoded JSON data."""
    config = config or EngineConfig()

    if isinstance(data, list):
        records, questions = data, {}
    elif isinstance(data, dict):
        unknown = sorted(set(data) - {"patterns", "questions"})
        if unknown:
            raise ConfigurationError(f"Unknown ruleset key(s): {', '.join(unknown)}")
        records = data.get("patterns", list(BUILTIN_RULES))
        questions = data.get("questions", {})
    else:
        raise ConfigurationError("Ruleset must be a list of patterns or an object")

    if not isinstance(records, list):
        raise ConfigurationError("'patterns' must be a list")
    if not isinstance(questions, dict):
        raise ConfigurationError("'questions' must be an object keyed by category")

    patterns = []
    for position, record in enumerate(records):
        if isinstance(record, str):
            record = {"id": record}
        pattern = _parse_record(record, position, config)
        if pattern is not None:
            patterns.append(pattern)

    overrides = {
        Category(validate_in_choices(key, CATEGORY_CHOICES, "questions key")):
            validate_question_list(items, f"questions[{key}]")
        for key, items in questions.items()
    }
    return Ruleset(
        library=PatternLibrary(patterns),
        question_bank=QuestionBank.default().merged(overrides),
    )


def _parse_record(record: Any, position: int, config: EngineConfig):
    if not isinstance(record, dict):
        raise ConfigurationError(f"patterns[{position}] must be an object")
    unknown = sorted(set(record) - RECORD_KEYS)
    if unknown:
        raise ConfigurationError(
            f"patterns[{position}] has unknown field(s): {', '.join(unknown)}"
        )
    if "id" not in record:
        raise ConfigurationError(f"patterns[{position}] is missing 'id'")

    pattern_id = validate_identifier(record["id"], f"patterns[{position}].id")
    if not validate_bool(record.get("enabled", True), f"patterns[{position}].enabled"):
        logger.debug(f"[Ruleset] Pattern '{pattern_id}' disabled")
        return None

    category = record.get("category")
    severity = record.get("severity")
    thresholds = record.get("thresholds", {})
    if not isinstance(thresholds, dict):
        raise ConfigurationError(f"patterns[{position}].thresholds must be an object")

    return build_pattern(
        pattern_id,
        config,
        category=Category(validate_in_choices(category, CATEGORY_CHOICES, "category"))
        if category is not None else None,
        severity=Severity(validate_in_choices(severity, SEVERITY_CHOICES, "severity"))
        if severity is not None else None,
        thresholds=thresholds,
    )


def dump_ruleset(library: PatternLibrary, question_bank: QuestionBank) -> dict:
    """Render a library and bank as a ruleset document load_ruleset accepts."""
    return {
        "patterns": [
            {
                "id": p.id,
                "category": p.category.value,
                "severity": p.severity.value,
                "thresholds": dict(p.params),
            }
            for p in library
        ],
        "questions": question_bank.to_dict(),
    }
