"""socratic_guard -- checks that AI coding assistants guide with questions."""

from .config import EngineConfig
from .enforcement import ComplianceEngine, ComplianceReport, classify
from .errors import (
    ComplianceError,
    ConfigurationError,
    InputTooLargeError,
    MalformedInputError,
    PatternEvaluationError,
    UnknownCategoryError,
)

__version__ = "0.1.0"

__all__ = [
    "ComplianceEngine",
    "ComplianceError",
    "ComplianceReport",
    "ConfigurationError",
    "EngineConfig",
    "InputTooLargeError",
    "MalformedInputError",
    "PatternEvaluationError",
    "UnknownCategoryError",
    "classify",
]
