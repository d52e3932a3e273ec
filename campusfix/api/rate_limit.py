"""
Rate limiting for API endpoints.

Uses slowapi with an in-memory backend by default, or Redis when
CAMPUSFIX_REDIS_URL is set (required for multiple workers).

Limits are applied per mock user when the header is present, per IP
otherwise.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from starlette.responses import JSONResponse

from campusfix.config import settings


def get_identifier(request: Request) -> str:
    """Rate limit key - mock user ID if given, IP otherwise."""
    user_id = request.headers.get("x-mock-user-id")
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


def get_storage_uri() -> str:
    """Storage backend URI - Redis if configured, memory otherwise."""
    return settings.redis_url or "memory://"


limiter = Limiter(
    key_func=get_identifier,
    storage_uri=get_storage_uri(),
    default_limits=[settings.default_rate_limit],
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests. Try again shortly.",
            "retry_after": exc.detail,
        },
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def write_limit(func):
    """Rate limit for write operations (POST/PUT/DELETE)."""
    return limiter.limit("30/minute")(func)
