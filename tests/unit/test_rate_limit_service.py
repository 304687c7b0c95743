"""Unit tests for RateLimiterService."""

from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request

from reply_stream.config.constants import RateLimitPreset
from reply_stream.repositories.exceptions import RepositoryError
from reply_stream.repositories.rate_limit_repository import InMemoryRateLimitStore
from reply_stream.services.rate_limit_service import RateLimiterService
from reply_stream.utils.metrics import MetricsCollector


def make_request(path="/api/v1/responses/stream", client=("10.0.0.1", 5000), headers=None):
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({
        "type": "http",
        "method": "POST",
        "path": path,
        "headers": raw_headers,
        "client": client,
        "query_string": b"",
    })


class TestClientIdentification:
    """Identifier derivation."""

    def test_uses_first_forwarded_address(self):
        request = make_request(headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})
        assert RateLimiterService.client_address(request) == "203.0.113.7"

    def test_falls_back_to_socket_address(self):
        assert RateLimiterService.client_address(make_request()) == "10.0.0.1"

    def test_unknown_without_client(self):
        assert RateLimiterService.client_address(make_request(client=None)) == "unknown"

    def test_identifier_joins_route_and_address(self):
        service = RateLimiterService(InMemoryRateLimitStore())
        assert service.identifier_for(make_request(path="/x")) == "/x:10.0.0.1"


class TestCheckRequest:
    """Preset application and failure handling."""

    @pytest.mark.asyncio
    async def test_strict_preset_allows_ten_per_minute(self):
        metrics = MetricsCollector()
        service = RateLimiterService(InMemoryRateLimitStore(), metrics=metrics)
        request = make_request()

        results = [await service.check_request(request, RateLimitPreset.STRICT) for _ in range(11)]

        assert [r.allowed for r in results] == [True] * 10 + [False]
        assert results[0].limit == 10
        assert metrics.registry.get_sample_value(
            "reply_stream_rate_limit_rejections_total",
            {"route": "/api/v1/responses/stream"}
        ) == 1

    @pytest.mark.asyncio
    async def test_routes_have_separate_budgets(self):
        service = RateLimiterService(InMemoryRateLimitStore())
        for _ in range(10):
            await service.check_request(make_request(path="/a"))

        result = await service.check_request(make_request(path="/b"))
        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_store_failure_admits_request(self):
        store = InMemoryRateLimitStore()
        store.check = AsyncMock(side_effect=RepositoryError("redis down"))
        service = RateLimiterService(store)

        result = await service.check_request(make_request())

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_disabled_limiter_never_checks_store(self):
        store = InMemoryRateLimitStore()
        store.check = AsyncMock()
        service = RateLimiterService(store, enabled=False)

        result = await service.check_request(make_request())

        assert result.allowed is True
        store.check.assert_not_awaited()
