"""Rate limiting for the bakery API.

Fixed-window counters keyed by client identifier and route, via slowapi.
The default storage is in-process memory, which is only correct for a
single instance; set RATE_LIMIT_STORAGE_URI to a redis:// URL to share
counters between instances.
"""

from functools import lru_cache

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings

DEFAULT_LIMIT = "100/15minutes"
ORDER_LIMIT = "10/minute"
UPLOAD_LIMIT = "20/minute"


def _get_client_ip(request: Request) -> str:
    """
    Client IP, preferring the first X-Forwarded-For hop, then X-Real-IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return get_remote_address(request) or "unknown"


def get_client_identifier(request: Request) -> str:
    """Key requests by IP plus whether they carry credentials."""
    kind = "authenticated" if request.headers.get("Authorization") else "anonymous"
    return f"{_get_client_ip(request)}-{kind}"


@lru_cache
def get_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=get_client_identifier,
        default_limits=[DEFAULT_LIMIT],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Render a 429; Retry-After is the length of the violated window.
    """
    limit = getattr(exc, "limit", None)
    retry_after = limit.limit.get_expiry() if limit is not None else 60

    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests"},
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Remaining": "0",
        },
    )
