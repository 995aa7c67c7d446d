"""
API Gateway -- FastAPI application factory.

Creates the FastAPI app with the classification and health routes.
This is the entrypoint for uvicorn:

    uvicorn socratic_guard.api.gateway:create_app --factory --host 0.0.0.0 --port 8000

The engine is built once at startup (from SOCRATIC_GUARD_* environment
variables and an optional SOCRATIC_GUARD_RULESET file) and shared read-only
by every request.
"""

import logging
import os
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import EngineConfig
from ..enforcement import ComplianceEngine, Ruleset, load_ruleset
from .middleware.rate_limit import RateLimiter, get_rate_limit
from .routes import classify, health

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://localhost:8080",
]


def _get_cors_origins() -> list[str]:
    """Load CORS origins from environment or use safe defaults."""
    origins_env = os.environ.get("CORS_ORIGINS", "")
    if origins_env.strip():
        return [o.strip() for o in origins_env.split(",") if o.strip()]
    return DEFAULT_CORS_ORIGINS


def create_app(
    config: EngineConfig | None = None,
    ruleset: Ruleset | None = None,
    rate_limit_per_minute: int | None = None,
) -> FastAPI:
    """
    Application factory -- creates and configures the FastAPI app.

    Args:
        config: Engine configuration (loaded from environment if None).
        ruleset: Pattern library and question bank (loaded from
            SOCRATIC_GUARD_RULESET if set, built-in rules otherwise).
        rate_limit_per_minute: Per-client request cap (environment if None).
    """
    if config is None:
        config = EngineConfig.from_env()
    if ruleset is None:
        ruleset_path = os.environ.get("SOCRATIC_GUARD_RULESET", "").strip()
        if ruleset_path:
            ruleset = load_ruleset(ruleset_path, config)

    if ruleset is not None:
        engine = ComplianceEngine(config, ruleset.library, ruleset.question_bank)
    else:
        engine = ComplianceEngine(config)

    application = FastAPI(
        title="socratic-guard API",
        description="Checks AI assistant responses against the Socratic interaction policy",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    application.state.engine = engine
    application.state.rate_limiter = RateLimiter(
        rate_limit_per_minute if rate_limit_per_minute is not None else get_rate_limit()
    )
    application.state.start_time = time.time()
    application.state.metrics = {
        "responses_classified": 0,
        "non_compliant": 0,
        "errors": 0,
    }

    application.include_router(health.router, tags=["Health"])
    application.include_router(
        classify.router, prefix="/api/v1", tags=["Classification"]
    )

    logger.info("[Gateway] API gateway initialized")
    return application
