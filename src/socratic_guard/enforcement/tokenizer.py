"""
ResponseTokenizer -- splits a raw response into classified segments.

Line classification, first rule that applies wins:
  1. Fence line (```, optional info string) -- opens/closes a code_block
  2. Line ending in "?" once list and emphasis markers are stripped -- question
  3. List item (-, *, +, 1., 1)) -- bullet_list, consecutive items merge
  4. ATX heading (# .. ######) -- heading, one segment per line
  5. Everything else, blank lines included -- prose, consecutive lines merge

Segments keep their line endings, so "".join(s.text for s in segments)
is exactly the input.
"""

import logging
import re

from ..errors import MalformedInputError
from .models import Segment, SegmentKind

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"^\s*```")
LIST_MARKER_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")
HEADING_PATTERN = re.compile(r"^\s{0,3}#{1,6}(?:\s|$)")
EMPHASIS_PATTERN = re.compile(r"(\*\*|__|\*|_)")

# Segment kinds whose consecutive lines merge into one segment
MERGING_KINDS = {SegmentKind.PROSE, SegmentKind.BULLET_LIST}


def is_question_line(line: str) -> bool:
    """True if a line asks something once markdown decoration is removed."""
    stripped = LIST_MARKER_PATTERN.sub("", line, count=1)
    stripped = EMPHASIS_PATTERN.sub("", stripped).rstrip()
    return stripped.endswith("?")


def classify_line(line: str) -> SegmentKind:
    """Classify a single non-fence line."""
    if is_question_line(line):
        return SegmentKind.QUESTION
    if LIST_MARKER_PATTERN.match(line):
        return SegmentKind.BULLET_LIST
    if HEADING_PATTERN.match(line):
        return SegmentKind.HEADING
    return SegmentKind.PROSE


def tokenize(raw_text: str) -> tuple[Segment, ...]:
    """Split a response into segments.

    Raises:
        MalformedInputError: If the response has an odd number of fence lines.
    """
    lines = raw_text.splitlines(keepends=True)
    _check_fences_balanced(lines)

    segments: list[Segment] = []
    current_kind: SegmentKind | None = None
    current_lines: list[str] = []
    start_line = 1
    start_pos = 0
    position = 0
    in_code = False

    def flush(end_line: int) -> None:
        nonlocal current_kind, current_lines
        if current_kind is not None and current_lines:
            segments.append(Segment(
                kind=current_kind,
                text="".join(current_lines),
                position=start_pos,
                line_span=(start_line, end_line),
            ))
        current_kind = None
        current_lines = []

    for number, line in enumerate(lines, 1):
        if in_code:
            current_lines.append(line)
            if FENCE_PATTERN.match(line):
                flush(number)
                in_code = False
        elif FENCE_PATTERN.match(line):
            flush(number - 1)
            current_kind, current_lines = SegmentKind.CODE_BLOCK, [line]
            start_line, start_pos = number, position
            in_code = True
        else:
            kind = classify_line(line)
            if kind is not current_kind or kind not in MERGING_KINDS:
                flush(number - 1)
                current_kind = kind
                start_line, start_pos = number, position
            current_lines.append(line)
        position += len(line)

    flush(len(lines))
    logger.debug(
        f"[Tokenizer] {len(lines)} lines -> {len(segments)} segments "
        f"({sum(1 for s in segments if s.kind is SegmentKind.CODE_BLOCK)} code blocks)"
    )
    return tuple(segments)


def _check_fences_balanced(lines: list[str]) -> None:
    fence_lines = [n for n, line in enumerate(lines, 1) if FENCE_PATTERN.match(line)]
    if len(fence_lines) % 2:
        unclosed = fence_lines[-1]
        raise MalformedInputError(
            f"Unbalanced code fences: {len(fence_lines)} fence markers, "
            f"the one on line {unclosed} is never closed",
            line=unclosed,
        )
