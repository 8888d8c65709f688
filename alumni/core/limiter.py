# File: alumni/core/limiter.py

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from alumni.core.config import settings

# Keyed by client IP. Point rate_limit_storage_uri at settings.redis_url
# when running more than one worker.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[settings.redis_rate_limit],
    enabled=settings.rate_limit_enabled,
)


async def custom_rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom exception handler for rate-limited requests to return a JSON response.
    """
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "You have made too many requests in a short period. Please try again later.",
            "error": f"Too Many Requests: rate limit exceeded ({exc.detail})",
        },
    )
