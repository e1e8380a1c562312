"""
Per-client rate limiting of the credential endpoints (slowapi).

Only login and registration are limited; they are where password
guessing happens. Counters live in process memory, so every worker
process keeps its own.
"""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from photoshelf.core.config import settings
from photoshelf.middleware.error_handler import error_body

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 60


def client_address(request: Request) -> str:
    """
    Key requests by client address.

    Proxy headers win over the socket peer. They are client-controlled
    unless a trusted proxy overwrites them.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # First entry is the original client
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (
        request.client.host if request.client else "unknown"
    )


limiter = Limiter(
    key_func=client_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Rate limit hit by {client_address(request)} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content=error_body(
            "Too many attempts, please try again later",
            request_id,
            {"limit": str(exc.detail)},
        ),
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
