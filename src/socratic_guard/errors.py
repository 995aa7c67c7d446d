"""
Error taxonomy for socratic_guard.

Every error surfaces to the caller unrecovered. A failure anywhere in
tokenization or evaluation aborts the whole classify call, so there is
never a partial report.
"""


class ComplianceError(Exception):
    """Base class for every error raised by the compliance engine."""


class MalformedInputError(ComplianceError):
    """Raised when code fences in a response are unbalanced."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.line = line


class InputTooLargeError(ComplianceError):
    """Raised when a response exceeds the configured maximum input length."""

    def __init__(self, length: int, max_length: int):
        super().__init__(
            f"Input is {length} characters, maximum allowed is {max_length}"
        )
        self.length = length
        self.max_length = max_length


class UnknownCategoryError(ComplianceError):
    """Raised when a violation category has no entry in the question bank.

    This is a configuration defect (library and question bank out of sync),
    not a problem with the classified text.
    """

    def __init__(self, categories: list[str]):
        names = ", ".join(categories)
        super().__init__(f"No question bank entry for category: {names}")
        self.categories = categories


class PatternEvaluationError(ComplianceError):
    """Raised when a pattern fails unexpectedly while scanning segments."""

    def __init__(self, pattern_id: str, cause: Exception):
        super().__init__(f"Pattern '{pattern_id}' failed: {cause}")
        self.pattern_id = pattern_id


class ConfigurationError(ComplianceError, ValueError):
    """Raised for invalid engine configuration or ruleset files."""
