"""ComplianceReportBuilder -- aggregates matches into a single verdict."""

import logging
from typing import Iterable, Sequence

from .models import Category, ComplianceReport, ExchangeReport, Match, Verdict
from .question_bank import QuestionBank

logger = logging.getLogger(__name__)


def zero_counts() -> dict[Category, int]:
    return {category: 0 for category in Category}


class ComplianceReportBuilder:
    """Turns a match list into a ComplianceReport.

    Usage:
        builder = ComplianceReportBuilder(QuestionBank.default())
        report = builder.build(matches)
    """

    def __init__(self, question_bank: QuestionBank):
        self._bank = question_bank

    def build(self, matches: Sequence[Match]) -> ComplianceReport:
        """Aggregate matches. Raises UnknownCategoryError for unbanked categories."""
        counts = zero_counts()
        for match in matches:
            counts[match.category] += 1

        questions: list[str] = []
        for category in dict.fromkeys(m.category for m in matches):
            for question in self._bank.questions_for(category):
                if question not in questions:
                    questions.append(question)

        return ComplianceReport(
            verdict=Verdict.NON_COMPLIANT if matches else Verdict.COMPLIANT,
            matches=tuple(matches),
            category_counts=counts,
            suggested_questions=tuple(questions),
            max_severity=max((m.severity for m in matches), key=lambda s: s.rank, default=None),
        )

    def build_exchange(self, turn_reports: Iterable[tuple[int, ComplianceReport]]) -> ExchangeReport:
        """Combine per-turn reports into one exchange verdict."""
        turn_reports = tuple(turn_reports)
        counts = zero_counts()
        for _, report in turn_reports:
            for category, count in report.category_counts.items():
                counts[category] += count

        compliant = all(report.is_compliant for _, report in turn_reports)
        return ExchangeReport(
            turn_reports=turn_reports,
            verdict=Verdict.COMPLIANT if compliant else Verdict.NON_COMPLIANT,
            category_counts=counts,
        )
