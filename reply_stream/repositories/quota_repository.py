"""
Quota Repository
================

Reads and increments the per-user usage counter stored on the
subscription row.
"""

from abc import abstractmethod
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from reply_stream.models.postgres.subscription_model import Subscription
from reply_stream.models.records import QuotaRecord
from reply_stream.models.types import UserId

from .base_repository import BaseRepository, SQLRepository
from .exceptions import RepositoryError, EntityNotFoundError


class QuotaRepository(BaseRepository):
    """Storage contract for quota records"""

    @abstractmethod
    async def get(self, user_id: UserId) -> Optional[QuotaRecord]:
        """Current quota record, or None when the user has no subscription"""

    @abstractmethod
    async def increment_usage(self, user_id: UserId) -> int:
        """
        Increase usage_count by exactly one.

        Returns:
            The new usage count

        Raises:
            EntityNotFoundError: If the subscription row is gone
            RepositoryError: If the write fails
        """


class SQLQuotaRepository(SQLRepository, QuotaRepository):
    """Quota records on the ``subscriptions`` table"""

    async def get(self, user_id: UserId) -> Optional[QuotaRecord]:
        try:
            async with self._timed_operation("get_quota", user_id=user_id):
                async with self._session() as session:
                    subscription = await session.scalar(
                        select(Subscription).where(Subscription.user_id == user_id)
                    )
                    return subscription.to_record() if subscription else None
        except SQLAlchemyError as e:
            self.logger.error("Failed to read quota", user_id=user_id, error=str(e))
            raise RepositoryError(f"Failed to read quota: {e}", original_error=e)

    async def increment_usage(self, user_id: UserId) -> int:
        try:
            async with self._timed_operation("increment_usage", user_id=user_id):
                async with self._session() as session:
                    # Single UPDATE so concurrent settlements never lose an increment
                    new_count = await session.scalar(
                        update(Subscription)
                        .where(Subscription.user_id == user_id)
                        .values(
                            usage_count=Subscription.usage_count + 1,
                            updated_at=datetime.now(timezone.utc)
                        )
                        .returning(Subscription.usage_count)
                        .execution_options(synchronize_session=False)
                    )
                    if new_count is None:
                        await session.rollback()
                        raise EntityNotFoundError("Subscription", user_id)
                    await session.commit()
                    return new_count
        except SQLAlchemyError as e:
            self.logger.error("Failed to increment usage", user_id=user_id, error=str(e))
            raise RepositoryError(f"Failed to increment usage: {e}", original_error=e)
