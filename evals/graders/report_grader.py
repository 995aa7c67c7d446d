"""
Report Graders -- deterministic evaluation of ComplianceReports.

Use for: expected verdicts, expected/forbidden categories, custom checks.
Fast, cheap, reproducible. Every scenario in tasks/ is graded the same way.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from socratic_guard.enforcement import Category, ComplianceReport, Verdict

logger = logging.getLogger(__name__)


@dataclass
class ReportGraderResult:
    """Result from grading one report."""

    eval_name: str
    passed: bool
    checks_passed: int = 0
    checks_total: int = 0
    failures: list[str] = field(default_factory=list)


class ReportGrader:
    """Runs named checks against a ComplianceReport.

    Usage:
        grader = (
            ReportGrader("finished_code")
            .expect_verdict(Verdict.NON_COMPLIANT)
            .expect_category(Category.GAVE_FINISHED_CODE)
        )
        result = grader.grade(classify(text))
    """

    def __init__(self, eval_name: str):
        self.eval_name = eval_name
        self._checks: list[tuple[str, Callable[[ComplianceReport], bool]]] = []

    def add_check(self, name: str, check_fn: Callable[[ComplianceReport], bool]) -> "ReportGrader":
        """Add a named check function. Returns self for chaining."""
        self._checks.append((name, check_fn))
        return self

    def expect_verdict(self, verdict: Verdict) -> "ReportGrader":
        return self.add_check(f"verdict_is_{verdict.value}", lambda r: r.verdict is verdict)

    def expect_category(self, category: Category) -> "ReportGrader":
        return self.add_check(
            f"has_{category.value}", lambda r: r.category_counts[category] > 0
        )

    def expect_no_category(self, category: Category) -> "ReportGrader":
        return self.add_check(
            f"lacks_{category.value}", lambda r: r.category_counts[category] == 0
        )

    def grade(self, report: ComplianceReport) -> ReportGraderResult:
        """Run all checks against the report."""
        failures = []
        passed_count = 0

        for name, check_fn in self._checks:
            if check_fn(report):
                passed_count += 1
            else:
                failures.append(f"FAIL: {name}")

        if failures:
            logger.info(f"[ReportGrader] {self.eval_name}: {len(failures)} failure(s)")

        return ReportGraderResult(
            eval_name=self.eval_name,
            passed=not failures,
            checks_passed=passed_count,
            checks_total=len(self._checks),
            failures=failures,
        )
