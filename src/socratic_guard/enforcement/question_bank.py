"""
QuestionBank -- corrective Socratic questions keyed by violation category.

When a response breaks the policy, the report suggests questions the
assistant could have asked instead of handing over the answer.
"""

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from ..errors import UnknownCategoryError
from .models import Category

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONS: dict[Category, tuple[str, ...]] = {
    Category.GAVE_FINISHED_CODE: (
        "What made you decide this approach is the simplest one?",
        "Which part of this would you like to try writing first?",
        "What should the function return for the smallest possible input?",
    ),
    Category.SOLVED_WITHOUT_REASONING: (
        "What have you tried so far, and what happened?",
        "How would you explain the problem in your own words?",
        "What do you expect to happen, and what actually happens?",
    ),
    Category.MADE_DECISION_FOR_USER: (
        "What options have you considered, and what trade-offs do you see?",
        "What constraints matter most for this decision?",
        "How would you know later whether this choice was the right one?",
    ),
    Category.SKIPPED_SECURITY_QUESTION: (
        "What's your threat model here?",
        "What attacks concern you most for this feature?",
        "Where does untrusted input enter this code?",
    ),
    Category.WROTE_TESTS_FOR_USER: (
        "What behavior do you want to guarantee with a test?",
        "Which edge cases worry you most?",
        "How would you know this code is broken?",
    ),
    Category.OTHER: (
        "What would you do next, and why?",
        "Which step feels least clear to you right now?",
    ),
}


class QuestionBank:
    """Read-only lookup from category to question templates.

    Usage:
        bank = QuestionBank.default()
        bank.ensure_covers(library.categories())  # at startup
        questions = bank.questions_for(Category.GAVE_FINISHED_CODE)
    """

    def __init__(self, questions: Mapping[Category, Iterable[str]]):
        self._questions = MappingProxyType(
            {category: tuple(items) for category, items in questions.items()}
        )

    @classmethod
    def default(cls) -> "QuestionBank":
        return cls(DEFAULT_QUESTIONS)

    def questions_for(self, category: Category) -> tuple[str, ...]:
        if category not in self._questions:
            raise UnknownCategoryError([category.value])
        return self._questions[category]

    def ensure_covers(self, categories: Iterable[Category]) -> None:
        """Raise UnknownCategoryError naming every category without questions."""
        missing = [c.value for c in categories if c not in self._questions]
        if missing:
            raise UnknownCategoryError(missing)

    def merged(self, overrides: Mapping[Category, Iterable[str]]) -> "QuestionBank":
        """New bank with the given categories' questions replaced."""
        return QuestionBank({**self._questions, **overrides})

    def categories(self) -> list[Category]:
        return list(self._questions)

    def to_dict(self) -> dict[str, list[str]]:
        return {c.value: list(q) for c, q in self._questions.items()}

    def __contains__(self, category: object) -> bool:
        return category in self._questions
