"""
PatternLibrary -- the ordered catalog of Socratic-policy violations.

Built-in rules (registration order):
  - unprompted-code-block: long code block not preceded by a question
  - announced-complete-solution: "Here's the complete implementation" + code
  - solution-without-questions: a worked answer that asks nothing
  - decisive-imperative: "Use X" / "you should" with no follow-up question
  - security-code-without-threat-question: auth/crypto/SQL code, no threat question
  - unrequested-test-code: test code handed over unprompted
  - prescribed-step-list: a long step list in a response that asks nothing

Detection is phrase and structure based. Paraphrased violations that avoid
the listed cues are not caught.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Sequence

from ..config import EngineConfig
from ..errors import ConfigurationError
from ..validators import validate_positive_int
from .models import Category, Detector, Match, Pattern, Segment, SegmentKind, Severity
from .tokenizer import LIST_MARKER_PATTERN

logger = logging.getLogger(__name__)

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")

ANNOUNCEMENT_PATTERN = re.compile(
    r"\b(?:here['’]?s|here\s+is|below\s+is|this\s+is)\s+(?:the|a|your)\s+"
    r"(?:complete|full|final|entire|finished|working)\s+"
    r"(?:implementation|solution|code|version|program|script|function|class|module)\b",
    re.IGNORECASE,
)

IMPERATIVE_VERBS = (
    "use", "go with", "switch to", "pick", "choose", "adopt", "implement",
    "add", "replace", "create", "install", "store", "wrap", "move",
    "refactor", "extract", "rename", "split", "configure",
)

DECISIVE_PATTERNS = [
    re.compile(
        r"^(?:just\s+|simply\s+)?(?:" + "|".join(v.replace(" ", r"\s+") for v in IMPERATIVE_VERBS) + r")\b",
        re.IGNORECASE,
    ),
    re.compile(r"\byou\s+(?:should|must|need\s+to|have\s+to|ought\s+to)\b", re.IGNORECASE),
    re.compile(r"\bI(?:\s+would|['’]d)?\s+(?:recommend|suggest)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:best|right|correct|only)\s+(?:approach|option|way|choice|solution)\s+(?:is|would\s+be)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\blet['’]?s\s+(?:use|go\s+with|switch\s+to|implement)\b", re.IGNORECASE),
]

SECURITY_CODE_PATTERN = re.compile(
    r"\b(password\w*|passwd|secret\w*|api[_-]?key|(?:access_|refresh_|auth_)?tokens?|"
    r"jwt|bcrypt|hashlib|sha256|md5|encrypt\w*|decrypt\w*|cipher\w*|crypto\w*|"
    r"sessions?|cookies?|csrf|oauth\w*|auth(?:enticat\w*|oriz\w*|_\w+)?|"
    r"login\w*|credential\w*|private[_-]?key|"
    r"select\s+[\w*,\s]+\s+from|insert\s+into|delete\s+from|execute)\b",
    re.IGNORECASE,
)

SECURITY_QUESTION_PATTERN = re.compile(
    r"\b(secur\w*|threat\w*|attack\w*|risk\w*|vulnerab\w*|trust\w*|safe\w*|"
    r"protect\w*|leak\w*|expos\w*|sanitiz\w*|validat\w*|inject\w*|malicious|"
    r"abuse\w*|permission\w*|privacy|encrypt\w*)\b",
    re.IGNORECASE,
)

TEST_CODE_PATTERN = re.compile(
    r"(\bdef\s+test_?\w*\s*\(|\bclass\s+Test\w*|^\s*assert\b|\bassert(?:Equal|True|False|Raises)\b|"
    r"\bpytest\.|\bimport\s+unittest\b|\bdescribe\s*\(|\bit\s*\(\s*['\"]|\btest\s*\(\s*['\"]|"
    r"\bexpect\s*\(|@Test\b|#\[test\]|\bfunc\s+Test\w*)",
    re.MULTILINE,
)


# =============================================================================
# SEGMENT HELPERS
# =============================================================================


def count_sentences(text: str) -> int:
    """Count sentences by terminal punctuation; a trailing fragment counts as one."""
    return sum(1 for s in SENTENCE_SPLIT.split(text.strip()) if s.strip())


def non_blank_code_lines(segment: Segment) -> int:
    return sum(1 for line in segment.body_lines if line.strip())


def previous_non_blank(segments: Sequence[Segment], index: int) -> Segment | None:
    for segment in reversed(segments[:index]):
        if not segment.is_blank:
            return segment
    return None


def next_non_blank(segments: Sequence[Segment], index: int, limit: int) -> list[Segment]:
    found = []
    for segment in segments[index + 1:]:
        if len(found) >= limit:
            break
        if not segment.is_blank:
            found.append(segment)
    return found


def asks_anything(segments: Sequence[Segment]) -> bool:
    """True if the response has a question segment or a '?' outside code."""
    for segment in segments:
        if segment.kind is SegmentKind.QUESTION:
            return True
        if segment.kind is not SegmentKind.CODE_BLOCK and "?" in segment.text:
            return True
    return False


def _prompted_by_question(segments: Sequence[Segment], index: int) -> bool:
    previous = previous_non_blank(segments, index)
    return previous is not None and previous.kind is SegmentKind.QUESTION


# =============================================================================
# DETECTORS
# =============================================================================


def detect_unprompted_code_block(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    threshold = pattern.params["code_block_line_threshold"]
    matches = []
    for i, segment in enumerate(segments):
        if segment.kind is not SegmentKind.CODE_BLOCK:
            continue
        size = len(segment.body_lines)
        if size > threshold and not _prompted_by_question(segments, i):
            matches.append(pattern.match(
                i,
                f"Code block of {size} lines (limit {threshold}) is handed over "
                f"without a guiding question before it",
            ))
    return matches


def detect_announced_solution(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    matches = []
    for i, segment in enumerate(segments):
        if segment.kind is not SegmentKind.PROSE:
            continue
        found = ANNOUNCEMENT_PATTERN.search(segment.text)
        if not found:
            continue
        following = next_non_blank(segments, i, 1)
        if following and following[0].kind is SegmentKind.CODE_BLOCK:
            matches.append(pattern.match(
                i, f"'{found.group(0)}' introduces a finished solution"
            ))
    return matches


def detect_solution_without_questions(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    if asks_anything(segments):
        return []
    threshold = pattern.params["prose_sentence_threshold"]
    for i, segment in enumerate(segments):
        if segment.kind is SegmentKind.PROSE:
            size, unit = count_sentences(segment.text), "sentences"
        elif segment.kind is SegmentKind.CODE_BLOCK:
            size, unit = non_blank_code_lines(segment), "lines of code"
        else:
            continue
        if size > threshold:
            return [pattern.match(
                i,
                f"Response explains {size} {unit} (limit {threshold}) "
                f"without asking the developer a single question",
            )]
    return []


def detect_decisive_imperative(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    lookahead = pattern.params["question_lookahead_segments"]
    matches = []
    for i, segment in enumerate(segments):
        if segment.kind is not SegmentKind.PROSE:
            continue
        phrase = find_decisive_phrase(segment.text)
        if phrase is None:
            continue
        following = next_non_blank(segments, i, lookahead)
        if any(s.kind is SegmentKind.QUESTION for s in following):
            continue
        matches.append(pattern.match(
            i, f"'{phrase}' decides for the developer with no question following it"
        ))
    return matches


def find_decisive_phrase(text: str) -> str | None:
    """Return the first decisive phrase in text, or None.

    Each line starts a new sentence, so an imperative after a lead-in such
    as "Here's my advice:" is still seen at sentence start.
    """
    for line in text.splitlines():
        for sentence in SENTENCE_SPLIT.split(line.strip()):
            sentence = sentence.strip().lstrip("*_>`\"' ")
            for regex in DECISIVE_PATTERNS:
                found = regex.search(sentence)
                if found:
                    return found.group(0)
    return None


def detect_security_without_question(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    raised = any(
        s.kind is SegmentKind.QUESTION and SECURITY_QUESTION_PATTERN.search(s.text)
        for s in segments
    )
    if raised:
        return []
    matches = []
    for i, segment in enumerate(segments):
        if segment.kind is not SegmentKind.CODE_BLOCK:
            continue
        found = SECURITY_CODE_PATTERN.search("\n".join(segment.body_lines))
        if found:
            matches.append(pattern.match(
                i,
                f"Code touches security-sensitive '{found.group(0)}' but no "
                f"question asks about threats or risks",
            ))
    return matches


def detect_unrequested_tests(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    matches = []
    for i, segment in enumerate(segments):
        if segment.kind is not SegmentKind.CODE_BLOCK:
            continue
        found = TEST_CODE_PATTERN.search("\n".join(segment.body_lines))
        if found and not _prompted_by_question(segments, i):
            matches.append(pattern.match(
                i, f"Test code ('{found.group(0).strip()}') written for the developer"
            ))
    return matches


def detect_prescribed_steps(pattern: Pattern, segments: Sequence[Segment]) -> list[Match]:
    if asks_anything(segments):
        return []
    threshold = pattern.params["step_list_item_threshold"]
    matches = []
    for i, segment in enumerate(segments):
        if segment.kind is not SegmentKind.BULLET_LIST:
            continue
        items = sum(1 for line in segment.body_lines if LIST_MARKER_PATTERN.match(line))
        if items >= threshold:
            matches.append(pattern.match(
                i, f"{items}-step plan prescribed with no question to the developer"
            ))
    return matches


# =============================================================================
# BUILT-IN RULES
# =============================================================================


@dataclass(frozen=True)
class BuiltinRule:
    """Defaults for a built-in detector.

    thresholds maps each parameter name to either an EngineConfig attribute
    name (str) or a fixed default (int).
    """

    detector: Detector
    category: Category
    severity: Severity
    description: str
    thresholds: dict[str, Any] = field(default_factory=dict)


BUILTIN_RULES: dict[str, BuiltinRule] = {
    "unprompted-code-block": BuiltinRule(
        detect_unprompted_code_block,
        Category.GAVE_FINISHED_CODE,
        Severity.HIGH,
        "Long code block with no question before it",
        {"code_block_line_threshold": "code_block_line_threshold"},
    ),
    "announced-complete-solution": BuiltinRule(
        detect_announced_solution,
        Category.GAVE_FINISHED_CODE,
        Severity.MEDIUM,
        "Prose announcing a complete solution, followed by code",
    ),
    "solution-without-questions": BuiltinRule(
        detect_solution_without_questions,
        Category.SOLVED_WITHOUT_REASONING,
        Severity.MEDIUM,
        "Worked answer that asks the developer nothing",
        {"prose_sentence_threshold": "prose_sentence_threshold"},
    ),
    "decisive-imperative": BuiltinRule(
        detect_decisive_imperative,
        Category.MADE_DECISION_FOR_USER,
        Severity.MEDIUM,
        "Decisive instruction with no question right after it",
        {"question_lookahead_segments": 2},
    ),
    "security-code-without-threat-question": BuiltinRule(
        detect_security_without_question,
        Category.SKIPPED_SECURITY_QUESTION,
        Severity.HIGH,
        "Security-sensitive code with no question about threats",
    ),
    "unrequested-test-code": BuiltinRule(
        detect_unrequested_tests,
        Category.WROTE_TESTS_FOR_USER,
        Severity.HIGH,
        "Test code written for the developer",
    ),
    "prescribed-step-list": BuiltinRule(
        detect_prescribed_steps,
        Category.OTHER,
        Severity.LOW,
        "Long step list in a response that asks nothing",
        {"step_list_item_threshold": "step_list_item_threshold"},
    ),
}


def build_pattern(
    pattern_id: str,
    config: EngineConfig,
    category: Category | None = None,
    severity: Severity | None = None,
    thresholds: Mapping[str, int] | None = None,
) -> Pattern:
    """Instantiate a built-in rule, binding thresholds from config and overrides."""
    rule = BUILTIN_RULES.get(pattern_id)
    if rule is None:
        raise ConfigurationError(
            f"Unknown pattern '{pattern_id}'. Built-in: {', '.join(BUILTIN_RULES)}"
        )

    params = {
        name: getattr(config, source) if isinstance(source, str) else source
        for name, source in rule.thresholds.items()
    }
    overrides = {}
    for name, value in (thresholds or {}).items():
        if name not in params:
            raise ConfigurationError(
                f"Pattern '{pattern_id}' has no threshold '{name}'"
                + (f" (has: {', '.join(params)})" if params else "")
            )
        overrides[name] = validate_positive_int(value, f"{pattern_id}.{name}")
    params.update(overrides)

    return Pattern(
        id=pattern_id,
        category=category or rule.category,
        severity=severity or rule.severity,
        detector=rule.detector,
        description=rule.description,
        params=params,
        overrides=overrides,
    )


# =============================================================================
# LIBRARY
# =============================================================================


class PatternLibrary:
    """Ordered, read-only catalog of patterns.

    Usage:
        library = PatternLibrary.default(EngineConfig(code_block_line_threshold=4))
        for pattern in library:
            matches = pattern.detect(segments)
    """

    def __init__(self, patterns: Iterable[Pattern] = ()):
        self._patterns = tuple(patterns)
        seen: set[str] = set()
        for pattern in self._patterns:
            if pattern.id in seen:
                raise ConfigurationError(f"Duplicate pattern id '{pattern.id}'")
            seen.add(pattern.id)

    @classmethod
    def default(cls, config: EngineConfig | None = None) -> "PatternLibrary":
        """All built-in rules in registration order."""
        config = config or EngineConfig()
        return cls(build_pattern(pattern_id, config) for pattern_id in BUILTIN_RULES)

    def rebind(self, config: EngineConfig) -> "PatternLibrary":
        """The same patterns, in the same order, with thresholds taken from config.

        Category, severity and explicit threshold overrides are kept. Patterns
        that are not built-in rules are carried over unchanged.
        """
        rebound = []
        for pattern in self._patterns:
            rule = BUILTIN_RULES.get(pattern.id)
            if rule is None or rule.detector is not pattern.detector:
                rebound.append(pattern)
                continue
            rebound.append(build_pattern(
                pattern.id,
                config,
                category=pattern.category,
                severity=pattern.severity,
                thresholds=pattern.overrides,
            ))
        return PatternLibrary(rebound)

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    def get(self, pattern_id: str) -> Pattern | None:
        for pattern in self._patterns:
            if pattern.id == pattern_id:
                return pattern
        return None

    def categories(self) -> list[Category]:
        """Distinct categories in registration order."""
        return list(dict.fromkeys(p.category for p in self._patterns))

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)
