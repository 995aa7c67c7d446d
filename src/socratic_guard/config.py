"""
Engine configuration -- thresholds and input limits for classification.

EngineConfig is immutable. Build a new one (with_overrides, from_env) to get
a stricter or more lenient engine; several can coexist in one process.

Configuration via environment (all optional):
  SOCRATIC_GUARD_CODE_BLOCK_LINE_THRESHOLD=8
  SOCRATIC_GUARD_PROSE_SENTENCE_THRESHOLD=3
  SOCRATIC_GUARD_MAX_INPUT_LENGTH=100000
  SOCRATIC_GUARD_STEP_LIST_ITEM_THRESHOLD=5
"""

import logging
import os
from dataclasses import asdict, dataclass, fields, replace

from .errors import ConfigurationError
from .validators import parse_positive_int, validate_positive_int

logger = logging.getLogger(__name__)

ENV_PREFIX = "SOCRATIC_GUARD_"

DEFAULT_CODE_BLOCK_LINE_THRESHOLD = 8
DEFAULT_PROSE_SENTENCE_THRESHOLD = 3
DEFAULT_MAX_INPUT_LENGTH = 100_000
DEFAULT_STEP_LIST_ITEM_THRESHOLD = 5


@dataclass(frozen=True)
class EngineConfig:
    """Recognized classification options.

    Attributes:
        code_block_line_threshold: Code blocks with more content lines than
            this (and no question before them) count as finished code.
        prose_sentence_threshold: A question-free response with a prose
            segment of more sentences than this counts as a worked solution.
        max_input_length: Longest accepted response, in characters.
        step_list_item_threshold: Minimum items for a question-free list to
            count as a prescribed step-by-step plan.
    """

    code_block_line_threshold: int = DEFAULT_CODE_BLOCK_LINE_THRESHOLD
    prose_sentence_threshold: int = DEFAULT_PROSE_SENTENCE_THRESHOLD
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH
    step_list_item_threshold: int = DEFAULT_STEP_LIST_ITEM_THRESHOLD

    def __post_init__(self):
        for f in fields(self):
            validate_positive_int(getattr(self, f.name), f.name)

    def with_overrides(self, **values) -> "EngineConfig":
        """Return a copy with the given options replaced. Unknown keys are rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown config option(s): {', '.join(unknown)}. "
                f"Known: {', '.join(sorted(known))}"
            )
        return replace(self, **values)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "EngineConfig":
        """Load options from SOCRATIC_GUARD_* environment variables."""
        env = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper(), "")
            if raw.strip():
                values[f.name] = parse_positive_int(raw, ENV_PREFIX + f.name.upper())
        if values:
            logger.info(f"[Config] Loaded from environment: {values}")
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)
