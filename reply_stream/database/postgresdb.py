"""
PostgreSQL Connection Management
===============================

SQLAlchemy 2.0 async engine and session factory shared by the repositories.
Any async driver URL works; production uses asyncpg, tests use aiosqlite.
"""

from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
)
import structlog

from reply_stream.models.base_model import BasePostgresModel
# Register tables on the metadata
from reply_stream.models import postgres  # noqa: F401

logger = structlog.get_logger(__name__)


class PostgresDatabase:
    """Owns the async engine and hands out a session factory"""

    def __init__(self, url: str, pool_size: int = 10, echo: bool = False):
        self.url = url
        self.pool_size = pool_size
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self.echo, "pool_pre_ping": True}
        if not self.url.startswith("sqlite"):
            options["pool_size"] = self.pool_size
        return options

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self.url, **self._engine_options())
            logger.info("Database engine created", driver=self.url.split("://", 1)[0])
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all tables. Schema migrations are managed outside the service."""
        async with self.engine.begin() as conn:
            await conn.run_sync(BasePostgresModel.metadata.create_all)

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None
