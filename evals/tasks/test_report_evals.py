"""
Report Evals -- verdicts, zero-filled counts, question suggestions.
"""

import pytest

from socratic_guard.enforcement import (
    Category,
    ComplianceReportBuilder,
    Match,
    QuestionBank,
    Severity,
    Verdict,
)
from socratic_guard.errors import UnknownCategoryError


def make_match(category, severity=Severity.MEDIUM, index=0):
    return Match(
        pattern_id=f"test-{category.value}",
        category=category,
        severity=severity,
        segment_index=index,
        explanation="test",
    )


class TestQuestionBank:
    """Eval: Does every declared category have corrective questions?"""

    def test_default_covers_every_category(self):
        bank = QuestionBank.default()
        bank.ensure_covers(Category)
        for category in Category:
            assert bank.questions_for(category)

    def test_missing_category_raises(self):
        bank = QuestionBank({Category.OTHER: ["What next?"]})
        with pytest.raises(UnknownCategoryError) as exc_info:
            bank.ensure_covers([Category.OTHER, Category.GAVE_FINISHED_CODE])
        assert exc_info.value.categories == ["gave-finished-code"]

    def test_merged_replaces_only_given_categories(self):
        bank = QuestionBank.default().merged({Category.OTHER: ["Custom?"]})
        assert bank.questions_for(Category.OTHER) == ("Custom?",)
        assert bank.questions_for(Category.GAVE_FINISHED_CODE)

    def test_default_mentions_threat_model(self):
        questions = QuestionBank.default().questions_for(Category.SKIPPED_SECURITY_QUESTION)
        assert "What's your threat model here?" in questions


class TestReportBuilder:
    """Eval: Is the report shape stable and the verdict correct?"""

    def test_no_matches_is_compliant(self):
        report = ComplianceReportBuilder(QuestionBank.default()).build([])
        assert report.verdict is Verdict.COMPLIANT
        assert report.is_compliant
        assert report.max_severity is None
        assert report.suggested_questions == ()
        assert dict(report.category_counts) == {c: 0 for c in Category}

    def test_counts_and_max_severity(self):
        matches = [
            make_match(Category.GAVE_FINISHED_CODE, Severity.HIGH),
            make_match(Category.MADE_DECISION_FOR_USER, Severity.LOW),
            make_match(Category.GAVE_FINISHED_CODE, Severity.MEDIUM),
        ]
        report = ComplianceReportBuilder(QuestionBank.default()).build(matches)
        assert report.verdict is Verdict.NON_COMPLIANT
        assert report.category_counts[Category.GAVE_FINISHED_CODE] == 2
        assert report.category_counts[Category.MADE_DECISION_FOR_USER] == 1
        assert report.category_counts[Category.OTHER] == 0
        assert report.max_severity is Severity.HIGH
        assert report.matches == tuple(matches)

    def test_questions_in_first_occurrence_order_deduplicated(self):
        bank = QuestionBank({
            Category.GAVE_FINISHED_CODE: ["Q1", "Q2"],
            Category.SOLVED_WITHOUT_REASONING: ["Q2", "Q3"],
        })
        matches = [
            make_match(Category.SOLVED_WITHOUT_REASONING),
            make_match(Category.GAVE_FINISHED_CODE),
            make_match(Category.SOLVED_WITHOUT_REASONING),
        ]
        report = ComplianceReportBuilder(bank).build(matches)
        assert report.suggested_questions == ("Q2", "Q3", "Q1")

    def test_unbanked_category_raises(self):
        builder = ComplianceReportBuilder(QuestionBank({Category.OTHER: ["?"]}))
        with pytest.raises(UnknownCategoryError):
            builder.build([make_match(Category.WROTE_TESTS_FOR_USER)])

    def test_to_dict_is_json_ready(self):
        report = ComplianceReportBuilder(QuestionBank.default()).build(
            [make_match(Category.OTHER, Severity.LOW, index=3)]
        )
        data = report.to_dict()
        assert data["verdict"] == "non_compliant"
        assert data["max_severity"] == "low"
        assert list(data["category_counts"]) == [c.value for c in Category]
        assert data["matches"][0]["segment_index"] == 3
        assert data["matches"][0]["category"] == "other"
