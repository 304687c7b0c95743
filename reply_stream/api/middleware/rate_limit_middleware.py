"""
Rate Limiting Middleware
Sliding-window admission for individual routes.
"""

from typing import Callable

from fastapi import Depends, Request

from reply_stream.config.constants import RateLimitPreset
from reply_stream.dependencies import get_rate_limiter
from reply_stream.exceptions import RateLimitExceededError
from reply_stream.repositories.rate_limit_repository import RateLimitResult, now_ms
from reply_stream.services.rate_limit_service import RateLimiterService


def rate_limit(preset: RateLimitPreset) -> Callable:
    """
    Build a dependency that enforces ``preset`` on the route it guards.

    On success the X-RateLimit-* headers are left on ``request.state`` for
    the route to copy onto its response.
    """

    async def check_rate_limit(
            request: Request,
            limiter: RateLimiterService = Depends(get_rate_limiter)
    ) -> RateLimitResult:
        result = await limiter.check_request(request, preset)

        if not result.allowed:
            raise RateLimitExceededError(
                limit=result.limit,
                remaining=result.remaining,
                reset_at_ms=result.reset_at_ms,
                retry_after=result.retry_after_seconds(now_ms()),
            )

        request.state.rate_limit_headers = result.to_headers()
        return result

    return check_rate_limit


check_strict_rate_limit = rate_limit(RateLimitPreset.STRICT)
