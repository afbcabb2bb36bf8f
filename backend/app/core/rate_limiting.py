"""
Rate Limiting & Throttling
Per-IP request throttling for the search endpoints.
Limits come from settings ("300/minute" style strings).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from limits import RateLimitItem
from fastapi import Request
from fastapi.responses import JSONResponse
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

SEARCH_LIMIT = settings.search_rate_limit
SUGGEST_LIMIT = settings.suggest_rate_limit
HEALTH_LIMIT = settings.health_rate_limit


def retry_after_seconds(item: RateLimitItem) -> int:
    """Window length of a limit ("300/minute" -> 60)."""
    return int(item.get_expiry())


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with the limit that was hit and how long to back off."""
    client_host = request.client.host if request.client else "unknown"
    retry_after = retry_after_seconds(exc.limit.limit)
    logger.warning(f"Rate limit {exc.detail} exceeded for {client_host}: {request.url.path}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "too_many_requests",
            "message": f"Rate limit exceeded ({exc.detail}). Please slow down.",
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
