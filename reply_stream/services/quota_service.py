"""
Quota Service

Gates generation on the user's monthly usage. The gate is a read-only check;
the counter is only incremented after a generation has been delivered and
recorded, which admits a narrow race between concurrent requests of the
same user.
"""

from typing import Optional

from reply_stream.exceptions import (
    InternalServerError, QuotaExceededError, QuotaNotFoundError
)
from reply_stream.models.records import QuotaRecord
from reply_stream.models.types import UserId
from reply_stream.repositories.exceptions import EntityNotFoundError, RepositoryError
from reply_stream.repositories.quota_repository import QuotaRepository
from reply_stream.services.base_service import BaseService
from reply_stream.services.exceptions import PersistenceError
from reply_stream.utils.metrics import MetricsCollector


class QuotaService(BaseService):
    """Reads and commits per-user usage"""

    def __init__(
            self,
            quota_repository: QuotaRepository,
            metrics: Optional[MetricsCollector] = None
    ):
        super().__init__()
        self.quota_repository = quota_repository
        self.metrics = metrics

    async def reserve(self, user_id: UserId) -> QuotaRecord:
        """
        Check that the user may start a generation.

        Returns:
            The current quota record

        Raises:
            QuotaNotFoundError: No subscription row for the user
            QuotaExceededError: usage_count has reached monthly_limit
        """
        try:
            record = await self.quota_repository.get(user_id)
        except RepositoryError as e:
            raise InternalServerError(
                "Failed to read quota", user_id=user_id, caused_by=e
            )

        if record is None:
            self.logger.warning("Quota record missing", user_id=user_id)
            if self.metrics:
                self.metrics.record_quota_rejected("not_found")
            raise QuotaNotFoundError(user_id=user_id)

        if record.is_exhausted:
            self.logger.warning(
                "Quota exceeded",
                user_id=user_id,
                tier=record.tier,
                usage_count=record.usage_count,
                monthly_limit=record.monthly_limit
            )
            if self.metrics:
                self.metrics.record_quota_rejected("exhausted")
            raise QuotaExceededError(
                usage_count=record.usage_count,
                monthly_limit=record.monthly_limit,
                user_id=user_id
            )

        return record

    async def commit_usage(self, user_id: UserId) -> int:
        """Increment usage by exactly one. Returns the new count."""
        try:
            usage = await self.quota_repository.increment_usage(user_id)
        except EntityNotFoundError as e:
            raise PersistenceError("Subscription vanished before usage commit", stage="quota", original_error=e)
        except RepositoryError as e:
            raise PersistenceError(f"Failed to commit usage: {e}", stage="quota", original_error=e)

        self.log_operation("commit_usage", user_id=user_id, usage_count=usage)
        return usage
