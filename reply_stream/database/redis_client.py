"""
Redis Connection Management
==========================

Async Redis client used by the shared sliding-window rate limiter.
"""

from typing import Any, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError
import structlog

logger = structlog.get_logger(__name__)


class RedisManager:
    """Lazily connects and owns one async Redis client"""

    def __init__(self, url: str, socket_timeout: float = 5.0):
        self.url = url
        self.socket_timeout = socket_timeout
        self._client: Optional[Redis] = None

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = Redis.from_url(
                self.url,
                decode_responses=True,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
                health_check_interval=30,
            )
            logger.info("Redis client created")
        return self._client

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.client.ping()
            return {"status": "healthy"}
        except RedisError as e:
            logger.error("Redis health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.info("Redis client closed")
        self._client = None
