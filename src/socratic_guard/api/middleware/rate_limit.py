"""
Rate limiting -- caps classification requests per client.

Uses an in-memory sliding window counter per client IP, held on app.state
so independently created apps do not share counters. For multiple replicas,
replace with a shared store.

Configuration via environment:
  SOCRATIC_GUARD_RATE_LIMIT_PER_MINUTE=120  (default: 120 requests per minute per IP)
"""

import logging
import os
import time
from typing import Callable

from fastapi import HTTPException, Request

from ...validators import parse_positive_int, validate_positive_int

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 120
RATE_LIMIT_ENV = "SOCRATIC_GUARD_RATE_LIMIT_PER_MINUTE"


def get_rate_limit() -> int:
    """Load rate limit from environment. Raises ConfigurationError if not a positive integer."""
    raw = os.environ.get(RATE_LIMIT_ENV, "")
    if not raw.strip():
        return DEFAULT_RATE_LIMIT
    return parse_positive_int(raw, RATE_LIMIT_ENV)


class RateLimiter:
    """Sliding one-minute window of request timestamps per client.

    Clients with no request inside the window are dropped on the next sweep,
    so memory tracks active clients only.
    """

    def __init__(
        self,
        limit_per_minute: int = DEFAULT_RATE_LIMIT,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.limit = validate_positive_int(limit_per_minute, "rate_limit_per_minute")
        self.window_seconds = window_seconds
        self._clock = clock
        self._request_log: dict[str, list[float]] = {}
        self._last_sweep = clock()

    @property
    def tracked_clients(self) -> int:
        return len(self._request_log)

    def check(self, client_id: str) -> None:
        """Record a request, raising HTTP 429 if the client is over the limit."""
        now = self._clock()
        cutoff = now - self.window_seconds
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(cutoff)
            self._last_sweep = now

        recent = [ts for ts in self._request_log.get(client_id, []) if ts > cutoff]

        if len(recent) >= self.limit:
            self._request_log[client_id] = recent
            logger.warning(f"[RateLimit] Client {client_id} exceeded {self.limit}/min")
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded ({self.limit} requests per minute)",
                headers={"Retry-After": str(int(self.window_seconds))},
            )

        recent.append(now)
        self._request_log[client_id] = recent

    def _sweep(self, cutoff: float) -> None:
        stale = [
            client_id for client_id, stamps in self._request_log.items()
            if not stamps or stamps[-1] <= cutoff
        ]
        for client_id in stale:
            del self._request_log[client_id]
        if stale:
            logger.debug(f"[RateLimit] Dropped {len(stale)} idle client(s)")


async def check_rate_limit(request: Request) -> None:
    """Dependency for routes that need rate limiting."""
    client_ip = request.client.host if request.client else "unknown"
    request.app.state.rate_limiter.check(client_ip)
