"""Rate limiting for credential endpoints using slowapi."""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().rate_limit_enabled,
)


def get_rate_limit_string() -> str:
    """Get the rate limit string from settings, e.g. ``10/minute``."""
    settings = get_settings()
    return f"{settings.rate_limit_requests}/{settings.rate_limit_window}"


async def rate_limit_exceeded_handler(
    _request: Request,
    _exc: RateLimitExceeded,
) -> JSONResponse:
    """Answer with the uniform error body and status 429."""
    return JSONResponse(
        status_code=429,
        content={
            "status": 429,
            "message": "Too many requests. Please wait a moment and try again.",
            "kind": "rate_limited",
        },
    )
