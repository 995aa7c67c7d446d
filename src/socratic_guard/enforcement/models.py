"""Data models for the compliance classification pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

# =============================================================================
# ENUMS
# =============================================================================


class SegmentKind(Enum):
    """What a span of response text is."""

    PROSE = "prose"
    CODE_BLOCK = "code_block"
    QUESTION = "question"
    BULLET_LIST = "bullet_list"
    HEADING = "heading"


class Category(Enum):
    """Violation categories. Declaration order is report order."""

    GAVE_FINISHED_CODE = "gave-finished-code"
    SOLVED_WITHOUT_REASONING = "solved-without-reasoning"
    MADE_DECISION_FOR_USER = "made-decision-for-user"
    SKIPPED_SECURITY_QUESTION = "skipped-security-question"
    WROTE_TESTS_FOR_USER = "wrote-tests-for-user"
    OTHER = "other"


class Severity(Enum):
    """Violation severity, weakest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


class Verdict(Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"


# =============================================================================
# SEGMENTS
# =============================================================================


@dataclass(frozen=True)
class Segment:
    """A classified contiguous span of a response.

    Attributes:
        kind: What the span is.
        text: The exact source text, line endings included.
        position: Character offset of the first character in the response.
        line_span: 1-based inclusive (start, end) line numbers.
    """

    kind: SegmentKind
    text: str
    position: int
    line_span: tuple[int, int]

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    @property
    def line_count(self) -> int:
        return self.line_span[1] - self.line_span[0] + 1

    @property
    def body_lines(self) -> list[str]:
        """Content lines of the segment; for code blocks the fences are dropped."""
        lines = self.text.splitlines()
        if self.kind is SegmentKind.CODE_BLOCK:
            return lines[1:-1]
        return lines


# =============================================================================
# PATTERNS AND MATCHES
# =============================================================================


@dataclass(frozen=True)
class Match:
    """One detected violation, pointing back at the segment that caused it."""

    pattern_id: str
    category: Category
    severity: Severity
    segment_index: int
    explanation: str

    def to_dict(self) -> dict:
        return {
            "pattern_id": self.pattern_id,
            "category": self.category.value,
            "severity": self.severity.value,
            "segment_index": self.segment_index,
            "explanation": self.explanation,
        }


Detector = Callable[["Pattern", Sequence[Segment]], list[Match]]


@dataclass(frozen=True)
class Pattern:
    """A declared, pure detection rule.

    The detector receives the pattern itself (for id, category, severity and
    params) and the full segment sequence, and returns matches in source
    order. Detectors must not keep state between calls.

    overrides holds the thresholds set explicitly (by a ruleset) rather than
    taken from the engine config; they survive rebinding to a new config.
    """

    id: str
    category: Category
    severity: Severity
    detector: Detector = field(repr=False, compare=False)
    description: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)
    overrides: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def detect(self, segments: Sequence[Segment]) -> list[Match]:
        return self.detector(self, segments)

    def match(self, segment_index: int, explanation: str) -> Match:
        """Build a Match attributed to this pattern."""
        return Match(
            pattern_id=self.id,
            category=self.category,
            severity=self.severity,
            segment_index=segment_index,
            explanation=explanation,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "description": self.description,
            "thresholds": dict(self.params),
        }


# =============================================================================
# REPORTS
# =============================================================================


@dataclass(frozen=True)
class ComplianceReport:
    """Verdict for one response.

    Attributes:
        verdict: compliant iff matches is empty.
        matches: Every violation found, in evaluation order.
        category_counts: Count per category; every declared category present.
        suggested_questions: Corrective questions for the categories found.
        max_severity: Highest severity among matches, None when compliant.
    """

    verdict: Verdict
    matches: tuple[Match, ...] = ()
    category_counts: Mapping[Category, int] = field(default_factory=dict)
    suggested_questions: tuple[str, ...] = ()
    max_severity: Severity | None = None

    def __post_init__(self):
        object.__setattr__(
            self, "category_counts", MappingProxyType(dict(self.category_counts))
        )

    @property
    def is_compliant(self) -> bool:
        return self.verdict is Verdict.COMPLIANT

    def to_dict(self) -> dict:
        return {
            "verdict": self.verdict.value,
            "max_severity": self.max_severity.value if self.max_severity else None,
            "matches": [m.to_dict() for m in self.matches],
            "category_counts": {c.value: n for c, n in self.category_counts.items()},
            "suggested_questions": list(self.suggested_questions),
        }


@dataclass(frozen=True)
class ExchangeTurn:
    """One message of an AI/developer exchange."""

    role: str
    content: str


@dataclass(frozen=True)
class ExchangeReport:
    """Reports for every assistant turn of an exchange.

    Attributes:
        turn_reports: (turn_index, report) for each classified turn.
        verdict: non_compliant if any classified turn is.
        category_counts: Counts summed across all classified turns.
    """

    turn_reports: tuple[tuple[int, ComplianceReport], ...]
    verdict: Verdict
    category_counts: Mapping[Category, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self, "category_counts", MappingProxyType(dict(self.category_counts))
        )

    def to_dict(self) -> dict:
        return {
            "verdict": self.verdict.value,
            "category_counts": {c.value: n for c, n in self.category_counts.items()},
            "turns": [
                {"turn_index": index, **report.to_dict()}
                for index, report in self.turn_reports
            ],
        }
