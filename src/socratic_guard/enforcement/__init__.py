"""
Compliance enforcement -- checks AI responses against the Socratic policy.

Components:
  - tokenize: Splits a response into prose/code/question/list/heading segments
  - PatternLibrary: Ordered catalog of violation rules
  - RuleEvaluator: Runs every rule over the segments
  - QuestionBank: Corrective questions per violation category
  - ComplianceReportBuilder: Aggregates matches into a verdict
  - ComplianceEngine: Wires them together (classify, classify_exchange)
"""

from .evaluator import RuleEvaluator
from .models import (
    Category,
    ComplianceReport,
    ExchangeReport,
    ExchangeTurn,
    Match,
    Pattern,
    Segment,
    SegmentKind,
    Severity,
    Verdict,
)
from .patterns import BUILTIN_RULES, PatternLibrary, build_pattern
from .pipeline import ComplianceEngine, classify
from .question_bank import QuestionBank
from .report import ComplianceReportBuilder
from .ruleset import Ruleset, dump_ruleset, load_ruleset, parse_ruleset
from .tokenizer import tokenize

__all__ = [
    "BUILTIN_RULES",
    "Category",
    "ComplianceEngine",
    "ComplianceReport",
    "ComplianceReportBuilder",
    "ExchangeReport",
    "ExchangeTurn",
    "Match",
    "Pattern",
    "PatternLibrary",
    "QuestionBank",
    "RuleEvaluator",
    "Ruleset",
    "Segment",
    "SegmentKind",
    "Severity",
    "Verdict",
    "build_pattern",
    "classify",
    "dump_ruleset",
    "load_ruleset",
    "parse_ruleset",
    "tokenize",
]
