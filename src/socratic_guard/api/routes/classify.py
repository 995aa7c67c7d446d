"""
Classification API -- run the compliance engine over HTTP.

  GET  /api/v1/patterns           -- Registered detection patterns
  POST /api/v1/classify           -- Classify one response
  POST /api/v1/classify/exchange  -- Classify the assistant turns of an exchange

Error mapping:
  MalformedInputError -> 422, InputTooLargeError -> 413,
  ConfigurationError -> 400, anything else from the engine -> 500
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ...enforcement import ComplianceEngine
from ...errors import (
    ComplianceError,
    ConfigurationError,
    InputTooLargeError,
    MalformedInputError,
)
from ..middleware.rate_limit import check_rate_limit
from ..models.requests import ClassifyExchangeRequest, ClassifyRequest
from ..models.responses import (
    ExchangeReportResponse,
    PatternInfo,
    PatternListResponse,
    ReportResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_STATUS = [
    (MalformedInputError, 422),
    (InputTooLargeError, 413),
    (ConfigurationError, 400),
]


def _engine_for(request: Request, overrides: dict[str, int]) -> ComplianceEngine:
    engine: ComplianceEngine = request.app.state.engine
    if not overrides:
        return engine
    return engine.reconfigure(config=engine.config.with_overrides(**overrides))


def _to_http_error(request: Request, error: ComplianceError) -> HTTPException:
    request.app.state.metrics["errors"] += 1
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            logger.info(f"[ClassifyAPI] Rejected request ({status_code}): {error}")
            return HTTPException(status_code=status_code, detail=str(error))
    logger.error(f"[ClassifyAPI] Engine failure: {error}")
    return HTTPException(status_code=500, detail=str(error))


@router.get("/patterns", response_model=PatternListResponse)
async def list_patterns(request: Request) -> PatternListResponse:
    """Patterns in registration order."""
    library = request.app.state.engine.library
    patterns = [PatternInfo(**p.to_dict()) for p in library]
    return PatternListResponse(patterns=patterns, total=len(patterns))


@router.post(
    "/classify",
    response_model=ReportResponse,
    dependencies=[Depends(check_rate_limit)],
)
async def classify_response(request: Request, body: ClassifyRequest) -> ReportResponse:
    """Classify one candidate AI response."""
    try:
        engine = _engine_for(request, body.config_overrides)
        report = engine.classify(body.text)
    except ComplianceError as e:
        raise _to_http_error(request, e) from e

    m = request.app.state.metrics
    m["responses_classified"] += 1
    if not report.is_compliant:
        m["non_compliant"] += 1
    return ReportResponse(**report.to_dict())


@router.post(
    "/classify/exchange",
    response_model=ExchangeReportResponse,
    dependencies=[Depends(check_rate_limit)],
)
async def classify_exchange(
    request: Request, body: ClassifyExchangeRequest
) -> ExchangeReportResponse:
    """Classify every assistant turn of an exchange."""
    try:
        engine = _engine_for(request, body.config_overrides)
        exchange = engine.classify_exchange(
            {"role": t.role, "content": t.content} for t in body.turns
        )
    except ComplianceError as e:
        raise _to_http_error(request, e) from e

    m = request.app.state.metrics
    m["responses_classified"] += len(exchange.turn_reports)
    m["non_compliant"] += sum(1 for _, r in exchange.turn_reports if not r.is_compliant)
    return ExchangeReportResponse(**exchange.to_dict())
