"""
RuleEvaluator -- runs every pattern of a library against a segment sequence.

Patterns run in registration order and each scans segments in source order,
so the same input always yields the same, identically ordered match list.
"""

import logging
from typing import Sequence

from ..errors import PatternEvaluationError
from .models import Match, Segment
from .patterns import PatternLibrary

logger = logging.getLogger(__name__)


class RuleEvaluator:
    """Collects matches from all registered patterns.

    Usage:
        evaluator = RuleEvaluator(PatternLibrary.default())
        matches = evaluator.evaluate(tokenize(response_text))
    """

    def __init__(self, library: PatternLibrary):
        self._library = library

    @property
    def library(self) -> PatternLibrary:
        return self._library

    def evaluate(self, segments: Sequence[Segment]) -> list[Match]:
        """Run each pattern in order and concatenate their matches.

        A pattern that does not apply to the segments yields no matches.
        A pattern that crashes aborts the whole evaluation.
        """
        segments = tuple(segments)
        matches: list[Match] = []

        for pattern in self._library:
            try:
                found = pattern.detect(segments)
            except Exception as e:
                logger.error(f"[RuleEvaluator] Pattern '{pattern.id}' crashed: {e}")
                raise PatternEvaluationError(pattern.id, e) from e
            if found:
                logger.debug(f"[RuleEvaluator] {pattern.id}: {len(found)} match(es)")
            matches.extend(found)

        return matches
