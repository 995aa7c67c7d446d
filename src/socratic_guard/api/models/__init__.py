"""Pydantic models for API request/response contracts."""
from .requests import ClassifyExchangeRequest, ClassifyRequest, ExchangeTurnModel
from .responses import (
    ExchangeReportResponse,
    HealthResponse,
    MetricsResponse,
    PatternInfo,
    PatternListResponse,
    ReportResponse,
)
