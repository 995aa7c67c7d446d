"""
ComplianceEngine -- tokenizes, evaluates and reports on AI responses.

    raw text -> tokenize -> RuleEvaluator (PatternLibrary) -> matches
             -> ComplianceReportBuilder (QuestionBank) -> ComplianceReport

An engine is immutable once built: its config, pattern library and question
bank never change, so one instance can serve concurrent callers. To change
rules, build a new engine with reconfigure().
"""

import logging
from functools import lru_cache
from typing import Iterable, Mapping

from ..config import EngineConfig
from ..errors import InputTooLargeError, MalformedInputError
from .evaluator import RuleEvaluator
from .models import ComplianceReport, ExchangeReport, ExchangeTurn
from .patterns import PatternLibrary
from .question_bank import QuestionBank
from .report import ComplianceReportBuilder
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

ASSISTANT_ROLES = {"assistant", "ai"}


class ComplianceEngine:
    """Classifies responses against the Socratic interaction policy.

    Usage:
        engine = ComplianceEngine(EngineConfig(code_block_line_threshold=4))
        report = engine.classify(response_text)
        if not report.is_compliant:
            for question in report.suggested_questions:
                ...

    Raises UnknownCategoryError at construction if the library uses a
    category the question bank has no questions for.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        library: PatternLibrary | None = None,
        question_bank: QuestionBank | None = None,
    ):
        self._config = config or EngineConfig()
        self._library = library if library is not None else PatternLibrary.default(self._config)
        self._bank = question_bank or QuestionBank.default()
        self._bank.ensure_covers(self._library.categories())
        self._evaluator = RuleEvaluator(self._library)
        self._builder = ComplianceReportBuilder(self._bank)
        logger.info(
            f"[Engine] Ready with {len(self._library)} pattern(s), "
            f"max input {self._config.max_input_length} chars"
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def library(self) -> PatternLibrary:
        return self._library

    @property
    def question_bank(self) -> QuestionBank:
        return self._bank

    def classify(self, raw_text: str) -> ComplianceReport:
        """Classify one response.

        Raises:
            InputTooLargeError: Text is longer than config.max_input_length.
            MalformedInputError: Code fences are unbalanced.
            PatternEvaluationError: A pattern crashed.
        """
        if len(raw_text) > self._config.max_input_length:
            logger.warning(
                f"[Engine] Rejected input of {len(raw_text)} chars "
                f"(max {self._config.max_input_length})"
            )
            raise InputTooLargeError(len(raw_text), self._config.max_input_length)

        segments = tokenize(raw_text)
        matches = self._evaluator.evaluate(segments)
        report = self._builder.build(matches)
        logger.debug(
            f"[Engine] {len(segments)} segments, {len(matches)} match(es): "
            f"{report.verdict.value}"
        )
        return report

    def classify_exchange(
        self, turns: Iterable[ExchangeTurn | Mapping[str, str]]
    ) -> ExchangeReport:
        """Classify every assistant turn of an exchange; other roles are skipped.

        Raises MalformedInputError if a turn's role or content is not a string.
        """
        turn_reports = []
        for index, turn in enumerate(turns):
            if isinstance(turn, Mapping):
                turn = ExchangeTurn(role=turn.get("role"), content=turn.get("content"))
            _check_turn(index, turn)
            if turn.role.strip().lower() not in ASSISTANT_ROLES:
                continue
            turn_reports.append((index, self.classify(turn.content)))

        exchange = self._builder.build_exchange(turn_reports)
        logger.debug(
            f"[Engine] Exchange: {len(turn_reports)} assistant turn(s), "
            f"{exchange.verdict.value}"
        )
        return exchange

    def reconfigure(
        self,
        config: EngineConfig | None = None,
        library: PatternLibrary | None = None,
        question_bank: QuestionBank | None = None,
    ) -> "ComplianceEngine":
        """Build a new engine. This engine is left untouched.

        A new config without an explicit library rebinds this engine's
        patterns to that config's thresholds. Disabled rules stay disabled and
        ruleset overrides are kept.
        """
        new_config = config or self._config
        if library is None:
            library = self._library.rebind(new_config) if config else self._library
        return ComplianceEngine(
            config=new_config,
            library=library,
            question_bank=question_bank or self._bank,
        )


def _check_turn(index: int, turn: ExchangeTurn) -> None:
    for name in ("role", "content"):
        value = getattr(turn, name)
        if not isinstance(value, str):
            raise MalformedInputError(
                f"Exchange turn {index}: '{name}' must be a string "
                f"(got {type(value).__name__})"
            )


@lru_cache(maxsize=16)
def _engine_for(config: EngineConfig) -> ComplianceEngine:
    return ComplianceEngine(config)


def classify(raw_text: str, config: EngineConfig | None = None) -> ComplianceReport:
    """Classify a response with the built-in rules and the given config."""
    return _engine_for(config or EngineConfig()).classify(raw_text)
