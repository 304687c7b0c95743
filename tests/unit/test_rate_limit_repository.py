"""Unit tests for the sliding-window rate limit stores."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from reply_stream.repositories.exceptions import RepositoryError
from reply_stream.repositories.rate_limit_repository import (
    InMemoryRateLimitStore,
    RateLimitResult,
    RedisRateLimitStore,
)

WINDOW_MS = 60_000
T0 = 1_700_000_000_000


class TestInMemoryRateLimitStore:
    """Tests for the per-process sliding window."""

    @pytest.mark.asyncio
    async def test_allows_up_to_max_requests(self):
        store = InMemoryRateLimitStore()
        results = [await store.check("route:1.2.3.4", WINDOW_MS, 3, T0 + i) for i in range(3)]

        assert all(r.allowed for r in results)
        assert [r.remaining for r in results] == [2, 1, 0]

    @pytest.mark.asyncio
    async def test_rejects_request_beyond_limit(self):
        store = InMemoryRateLimitStore()
        for i in range(3):
            await store.check("id", WINDOW_MS, 3, T0 + i)

        result = await store.check("id", WINDOW_MS, 3, T0 + 10)

        assert result.allowed is False
        assert result.remaining == 0
        assert result.reset_at_ms == T0 + WINDOW_MS

    @pytest.mark.asyncio
    async def test_rejected_request_is_not_recorded(self):
        store = InMemoryRateLimitStore()
        await store.check("id", WINDOW_MS, 1, T0)
        for i in range(5):
            await store.check("id", WINDOW_MS, 1, T0 + 100 + i)

        # Only the first request occupies the window
        result = await store.check("id", WINDOW_MS, 1, T0 + WINDOW_MS)
        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_allowed_again_after_reset(self):
        store = InMemoryRateLimitStore()
        for i in range(10):
            await store.check("id", WINDOW_MS, 10, T0 + i)
        rejected = await store.check("id", WINDOW_MS, 10, T0 + 500)
        assert rejected.allowed is False

        result = await store.check("id", WINDOW_MS, 10, rejected.reset_at_ms)
        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_identifiers_do_not_share_budget(self):
        store = InMemoryRateLimitStore()
        await store.check("/a:1.1.1.1", WINDOW_MS, 1, T0)

        other = await store.check("/b:1.1.1.1", WINDOW_MS, 1, T0)
        same = await store.check("/a:1.1.1.1", WINDOW_MS, 1, T0)

        assert other.allowed is True
        assert same.allowed is False

    @pytest.mark.asyncio
    async def test_purge_expired_drops_empty_windows(self):
        store = InMemoryRateLimitStore()
        await store.check("old", WINDOW_MS, 5, T0)
        await store.check("new", WINDOW_MS, 5, T0 + WINDOW_MS)

        removed = await store.purge_expired(WINDOW_MS, T0 + WINDOW_MS + 1)

        assert removed == 1
        assert len(store) == 1


class TestRateLimitResult:
    """Tests for retry-after and header rendering."""

    def test_retry_after_rounds_up(self):
        result = RateLimitResult(allowed=False, limit=10, remaining=0, reset_at_ms=T0 + 1500)
        assert result.retry_after_seconds(T0) == 2

    def test_retry_after_never_negative(self):
        result = RateLimitResult(allowed=False, limit=10, remaining=0, reset_at_ms=T0)
        assert result.retry_after_seconds(T0 + 5000) == 0

    def test_headers(self):
        result = RateLimitResult(allowed=True, limit=10, remaining=7, reset_at_ms=0)
        headers = result.to_headers()

        assert headers["X-RateLimit-Limit"] == "10"
        assert headers["X-RateLimit-Remaining"] == "7"
        assert headers["X-RateLimit-Reset"].startswith("1970-01-01T00:00:00")


class TestRedisRateLimitStore:
    """Tests for the Redis store with the script call mocked."""

    def _store(self, script):
        redis_client = MagicMock()
        redis_client.register_script.return_value = script
        return RedisRateLimitStore(redis_client)

    @pytest.mark.asyncio
    async def test_allowed_result(self):
        script = AsyncMock(return_value=[1, 2, T0 + WINDOW_MS])
        store = self._store(script)

        result = await store.check("route:ip", WINDOW_MS, 10, T0)

        assert result.allowed is True
        assert result.remaining == 7
        assert result.reset_at_ms == T0 + WINDOW_MS
        kwargs = script.await_args.kwargs
        assert kwargs["keys"] == ["ratelimit:route:ip"]
        assert kwargs["args"][:3] == [T0, WINDOW_MS, 10]

    @pytest.mark.asyncio
    async def test_rejected_result(self):
        store = self._store(AsyncMock(return_value=[0, 10, T0 + 30_000]))

        result = await store.check("route:ip", WINDOW_MS, 10, T0)

        assert result.allowed is False
        assert result.remaining == 0
        assert result.reset_at_ms == T0 + 30_000

    @pytest.mark.asyncio
    async def test_redis_failure_raises_repository_error(self):
        store = self._store(AsyncMock(side_effect=RedisConnectionError("down")))

        with pytest.raises(RepositoryError):
            await store.check("route:ip", WINDOW_MS, 10, T0)
