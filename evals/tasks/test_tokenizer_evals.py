"""
Tokenizer Evals -- segment classification, merging, offsets, round-trip.
"""

import pytest

from socratic_guard.enforcement import SegmentKind, tokenize
from socratic_guard.errors import MalformedInputError


class TestLineClassification:
    """Eval: Does each kind of line land in the right segment kind?"""

    def test_mixed_response_segments(self, mixed_response):
        segments = tokenize(mixed_response)
        assert [s.kind for s in segments] == [
            SegmentKind.HEADING,
            SegmentKind.PROSE,
            SegmentKind.BULLET_LIST,
            SegmentKind.PROSE,
            SegmentKind.QUESTION,
            SegmentKind.QUESTION,
        ]

    def test_bold_question_is_question(self):
        segments = tokenize("**What would you test first?**")
        assert segments[0].kind is SegmentKind.QUESTION

    def test_list_item_question_is_question(self):
        segments = tokenize("- Which database are you already running?\n- a plain note\n")
        assert [s.kind for s in segments] == [SegmentKind.QUESTION, SegmentKind.BULLET_LIST]

    def test_numbered_list_items_merge(self):
        segments = tokenize("1. first\n2. second\n3) third\n")
        assert len(segments) == 1
        assert segments[0].kind is SegmentKind.BULLET_LIST
        assert segments[0].line_span == (1, 3)

    def test_each_heading_is_its_own_segment(self):
        segments = tokenize("# One\n## Two\n")
        assert [s.kind for s in segments] == [SegmentKind.HEADING, SegmentKind.HEADING]

    def test_hash_without_space_is_prose(self):
        segments = tokenize("#hashtag not a heading\n")
        assert segments[0].kind is SegmentKind.PROSE

    def test_consecutive_prose_lines_merge(self):
        segments = tokenize("First line.\nSecond line.\n\nThird line.\n")
        assert len(segments) == 1
        assert segments[0].kind is SegmentKind.PROSE

    def test_question_mark_mid_line_is_prose(self):
        segments = tokenize("Why? Because the index is missing.\n")
        assert segments[0].kind is SegmentKind.PROSE

    def test_empty_input_has_no_segments(self):
        assert tokenize("") == ()


class TestCodeBlocks:
    """Eval: Are fenced regions captured whole, fences included?"""

    def test_code_block_with_language_tag(self):
        text = "Intro\n```python\nx = 1\n```\nDone"
        segments = tokenize(text)
        assert [s.kind for s in segments] == [
            SegmentKind.PROSE,
            SegmentKind.CODE_BLOCK,
            SegmentKind.PROSE,
        ]
        code = segments[1]
        assert code.position == len("Intro\n")
        assert code.line_span == (2, 4)
        assert code.body_lines == ["x = 1"]

    def test_question_inside_code_stays_code(self):
        segments = tokenize("```\nvalue = a if ok else b  # why?\n```\n")
        assert len(segments) == 1
        assert segments[0].kind is SegmentKind.CODE_BLOCK

    def test_list_markers_inside_code_stay_code(self, make_fence):
        segments = tokenize(make_fence(3, body="- item {n}"))
        assert len(segments) == 1
        assert segments[0].kind is SegmentKind.CODE_BLOCK
        assert len(segments[0].body_lines) == 3

    def test_unbalanced_fence_raises(self):
        with pytest.raises(MalformedInputError) as exc_info:
            tokenize("Here you go:\n```\nprint('hi')\n")
        assert exc_info.value.line == 2

    def test_third_fence_is_reported_unclosed(self):
        with pytest.raises(MalformedInputError) as exc_info:
            tokenize("```\na\n```\ntext\n```\nb\n")
        assert exc_info.value.line == 5


class TestRoundTrip:
    """Eval: Do segment texts concatenate back to the input?"""

    SAMPLES = [
        "Plain prose without a newline",
        "# Title\n\nSome text.\n- a\n- b\nWhat now?\n",
        "Intro\r\n```js\r\nconst a = 1;\r\n```\r\nDone?\r\n",
        "\n\n  indented prose  \n\n",
    ]

    @pytest.mark.parametrize("text", SAMPLES)
    def test_concatenation_reproduces_input(self, text):
        assert "".join(s.text for s in tokenize(text)) == text

    def test_positions_match_offsets(self, mixed_response):
        for segment in tokenize(mixed_response):
            start = segment.position
            assert mixed_response[start:start + len(segment.text)] == segment.text

    def test_segments_are_immutable(self):
        segment = tokenize("Some prose.")[0]
        with pytest.raises(AttributeError):
            segment.text = "changed"
