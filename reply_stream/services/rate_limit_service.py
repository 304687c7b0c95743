"""
Rate Limiter Service

Applies the sliding-window presets to incoming requests. The identifier is
the route path joined with the client address, so one client's budget on
one route never consumes its budget on another.
"""

from typing import Optional

from fastapi import Request

from reply_stream.config.constants import RATE_LIMIT_PRESETS, RateLimitPreset
from reply_stream.repositories.exceptions import RepositoryError
from reply_stream.repositories.rate_limit_repository import (
    RateLimitResult, RateLimitStore, now_ms
)
from reply_stream.services.base_service import BaseService
from reply_stream.utils.metrics import MetricsCollector

UNKNOWN_CLIENT = "unknown"


class RateLimiterService(BaseService):
    """Sliding-window admission control for HTTP routes"""

    def __init__(
            self,
            store: RateLimitStore,
            enabled: bool = True,
            metrics: Optional[MetricsCollector] = None
    ):
        super().__init__()
        self.store = store
        self.enabled = enabled
        self.metrics = metrics

    @staticmethod
    def client_address(request: Request) -> str:
        """First X-Forwarded-For entry, else the socket peer address."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        if request.client and request.client.host:
            return request.client.host
        return UNKNOWN_CLIENT

    def identifier_for(self, request: Request) -> str:
        return f"{request.url.path}:{self.client_address(request)}"

    async def check_request(
            self,
            request: Request,
            preset: RateLimitPreset = RateLimitPreset.STRICT
    ) -> RateLimitResult:
        """
        Check-and-record one request against a preset.

        Never raises for an exceeded limit; the caller turns a disallowed
        result into a 429. A store outage admits the request.
        """
        config = RATE_LIMIT_PRESETS[preset]
        window_ms = config["window_ms"]
        max_requests = config["max_requests"]
        current_ms = now_ms()

        if not self.enabled:
            return RateLimitResult(
                allowed=True,
                limit=max_requests,
                remaining=max_requests,
                reset_at_ms=current_ms + window_ms,
            )

        identifier = self.identifier_for(request)
        try:
            result = await self.store.check(identifier, window_ms, max_requests, current_ms)
        except RepositoryError as e:
            self.logger.error(
                "Rate limit store unavailable, admitting request",
                identifier=identifier,
                error=str(e)
            )
            return RateLimitResult(
                allowed=True,
                limit=max_requests,
                remaining=max_requests,
                reset_at_ms=current_ms + window_ms,
            )

        if not result.allowed:
            self.logger.warning(
                "Rate limit exceeded",
                identifier=identifier,
                preset=preset.value,
                limit=result.limit,
                reset_at_ms=result.reset_at_ms
            )
            if self.metrics:
                self.metrics.record_rate_limited(request.url.path)

        return result
