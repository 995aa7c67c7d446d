"""
Pydantic response models -- mirror ComplianceReport.to_dict() over HTTP.
"""

from pydantic import BaseModel, Field


# =============================================================================
# CLASSIFICATION
# =============================================================================


class MatchResponse(BaseModel):
    """A single violation."""

    pattern_id: str
    category: str
    severity: str
    segment_index: int
    explanation: str


class ReportResponse(BaseModel):
    """Verdict for one response."""

    verdict: str
    max_severity: str | None = None
    matches: list[MatchResponse] = Field(default_factory=list)
    category_counts: dict[str, int] = Field(default_factory=dict)
    suggested_questions: list[str] = Field(default_factory=list)


class TurnReportResponse(ReportResponse):
    turn_index: int


class ExchangeReportResponse(BaseModel):
    """Verdict for a whole exchange."""

    verdict: str
    category_counts: dict[str, int] = Field(default_factory=dict)
    turns: list[TurnReportResponse] = Field(default_factory=list)


class PatternInfo(BaseModel):
    """A registered detection pattern."""

    id: str
    category: str
    severity: str
    description: str = ""
    thresholds: dict[str, int] = Field(default_factory=dict)


class PatternListResponse(BaseModel):
    patterns: list[PatternInfo] = Field(default_factory=list)
    total: int = 0


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = "0.1.0"
    patterns_registered: int = 0
    uptime_seconds: float = 0.0


class MetricsResponse(BaseModel):
    """Basic operational metrics."""

    responses_classified: int = 0
    non_compliant: int = 0
    errors: int = 0
