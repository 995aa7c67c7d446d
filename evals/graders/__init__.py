"""
Eval graders -- deterministic checks over compliance reports.

- ReportGrader: expected verdicts and categories (fast, cheap, reproducible)
"""

from .report_grader import ReportGrader, ReportGraderResult
