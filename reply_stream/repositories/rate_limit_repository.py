"""
Rate Limit Repository Implementation
===================================

Sliding-window request counters keyed by identifier. Each check purges
timestamps older than the window, then admits the request only while the
window holds fewer than ``max_requests`` entries. A rejected request is not
recorded.

Two stores are provided:
- InMemoryRateLimitStore: instance-owned, guarded by an asyncio.Lock
- RedisRateLimitStore: shared across processes, atomic via a Lua script
"""

import asyncio
import math
import time
import uuid
from abc import abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .base_repository import BaseRepository
from .exceptions import RepositoryError


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check"""
    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: int  # Unix epoch milliseconds

    def retry_after_seconds(self, current_ms: Optional[int] = None) -> int:
        """Whole seconds until the window frees a slot"""
        current_ms = now_ms() if current_ms is None else current_ms
        return max(0, math.ceil((self.reset_at_ms - current_ms) / 1000))

    def to_headers(self) -> Dict[str, str]:
        """Convert to HTTP headers"""
        reset = datetime.fromtimestamp(self.reset_at_ms / 1000, tz=timezone.utc)
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": reset.isoformat(),
        }


class RateLimitStore(BaseRepository):
    """Storage contract for sliding-window checks"""

    @abstractmethod
    async def check(
            self,
            identifier: str,
            window_ms: int,
            max_requests: int,
            current_ms: Optional[int] = None
    ) -> RateLimitResult:
        """
        Check-and-record one request for ``identifier``.

        Must be atomic with respect to concurrent checks on the same
        identifier. Exceeding the limit is reported through the result,
        never raised.
        """


class InMemoryRateLimitStore(RateLimitStore):
    """Per-process sliding window held in a dict of deques"""

    def __init__(self):
        super().__init__()
        self._windows: Dict[str, Deque[int]] = {}
        self._lock = asyncio.Lock()

    async def check(
            self,
            identifier: str,
            window_ms: int,
            max_requests: int,
            current_ms: Optional[int] = None
    ) -> RateLimitResult:
        current_ms = now_ms() if current_ms is None else current_ms

        async with self._lock:
            window = self._windows.setdefault(identifier, deque())
            self._purge(window, current_ms, window_ms)
            count = len(window)

            if count < max_requests:
                window.append(current_ms)
                return RateLimitResult(
                    allowed=True,
                    limit=max_requests,
                    remaining=max_requests - count - 1,
                    reset_at_ms=window[0] + window_ms,
                )

            return RateLimitResult(
                allowed=False,
                limit=max_requests,
                remaining=0,
                reset_at_ms=window[0] + window_ms,
            )

    @staticmethod
    def _purge(window: Deque[int], current_ms: int, window_ms: int) -> None:
        while window and current_ms - window[0] >= window_ms:
            window.popleft()

    async def purge_expired(self, window_ms: int, current_ms: Optional[int] = None) -> int:
        """Drop identifiers whose windows are empty. Returns how many were dropped."""
        current_ms = now_ms() if current_ms is None else current_ms
        async with self._lock:
            stale = []
            for identifier, window in self._windows.items():
                self._purge(window, current_ms, window_ms)
                if not window:
                    stale.append(identifier)
            for identifier in stale:
                del self._windows[identifier]

        if stale:
            self._log_operation("purge_expired", removed=len(stale))
        return len(stale)

    def __len__(self) -> int:
        return len(self._windows)


class RedisRateLimitStore(RateLimitStore):
    """Sliding window in a Redis sorted set, shared by every worker"""

    KEY_PREFIX = "ratelimit"

    SLIDING_WINDOW_SCRIPT = """
    local key = KEYS[1]
    local current_ms = tonumber(ARGV[1])
    local window_ms = tonumber(ARGV[2])
    local limit = tonumber(ARGV[3])
    local member = ARGV[4]

    redis.call('ZREMRANGEBYSCORE', key, '-inf', current_ms - window_ms)

    local count = redis.call('ZCARD', key)
    local allowed = 0
    if count < limit then
        redis.call('ZADD', key, current_ms, member)
        allowed = 1
    end

    redis.call('PEXPIRE', key, window_ms)

    local reset_at = current_ms + window_ms
    local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
    if #oldest > 0 then
        reset_at = tonumber(oldest[2]) + window_ms
    end

    return {allowed, count, reset_at}
    """

    def __init__(self, redis_client: Redis):
        super().__init__()
        self.redis = redis_client
        self._script = redis_client.register_script(self.SLIDING_WINDOW_SCRIPT)

    def _key(self, identifier: str) -> str:
        return f"{self.KEY_PREFIX}:{identifier}"

    async def check(
            self,
            identifier: str,
            window_ms: int,
            max_requests: int,
            current_ms: Optional[int] = None
    ) -> RateLimitResult:
        current_ms = now_ms() if current_ms is None else current_ms
        member = f"{current_ms}-{uuid.uuid4().hex}"

        try:
            allowed, count, reset_at = await self._script(
                keys=[self._key(identifier)],
                args=[current_ms, window_ms, max_requests, member]
            )
        except RedisError as e:
            self.logger.error("Rate limit check failed", identifier=identifier, error=str(e))
            raise RepositoryError(f"Failed to check rate limit: {e}", original_error=e)

        allowed = bool(int(allowed))
        count = int(count)
        return RateLimitResult(
            allowed=allowed,
            limit=max_requests,
            remaining=max_requests - count - 1 if allowed else 0,
            reset_at_ms=int(reset_at),
        )
