"""
Base Repository Pattern Implementation
=====================================

Shared logging, timing and session handling for the repositories.
"""

import asyncio
from abc import ABC
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog


class BaseRepository(ABC):
    """Abstract base repository with structured logging"""

    def __init__(self):
        self.logger = structlog.get_logger(self.__class__.__name__)

    def _log_operation(
            self,
            operation: str,
            duration_ms: Optional[float] = None,
            **kwargs
    ) -> None:
        """
        Log repository operation with structured data

        Args:
            operation: Operation name
            duration_ms: Operation duration in milliseconds
            **kwargs: Additional context data
        """
        log_data = {
            "operation": operation,
            "repository": self.__class__.__name__,
            **kwargs
        }

        if duration_ms is not None:
            log_data["duration_ms"] = round(duration_ms, 2)

        self.logger.debug("Repository operation completed", **log_data)

    @asynccontextmanager
    async def _timed_operation(self, operation: str, **kwargs):
        """Time the wrapped block and log it on exit"""
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        try:
            yield
        finally:
            duration_ms = (loop.time() - start_time) * 1000
            self._log_operation(operation, duration_ms, **kwargs)


class SQLRepository(BaseRepository):
    """Repository backed by an SQLAlchemy async session factory"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__()
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
