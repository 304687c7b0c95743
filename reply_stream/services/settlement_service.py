"""
Settlement Service

Decides the terminal event of a generation stream. Delivered content is
never retracted: a persistence failure after delivery still ends the
stream with ``error`` and is logged for reconciliation.
"""

from typing import List, Optional

from reply_stream.config.constants import ERROR_MESSAGES
from reply_stream.models.events import DoneEvent, ErrorEvent, TerminalEvent
from reply_stream.models.records import AccumulatedVariant, ResponseHistoryRecord
from reply_stream.models.schemas import GenerationRequest
from reply_stream.models.types import UserId
from reply_stream.repositories.exceptions import RepositoryError
from reply_stream.repositories.history_repository import HistoryRepository
from reply_stream.services.base_service import BaseService
from reply_stream.services.exceptions import GenerationError, PersistenceError
from reply_stream.services.quota_service import QuotaService


class SettlementService(BaseService):
    """Persists completed generations and commits usage"""

    def __init__(self, history_repository: HistoryRepository, quota_service: QuotaService):
        super().__init__()
        self.history_repository = history_repository
        self.quota_service = quota_service

    async def settle_success(
            self,
            user_id: UserId,
            request: GenerationRequest,
            variants: List[AccumulatedVariant],
            model: str
    ) -> TerminalEvent:
        """
        Write one history record and increment usage by one.

        Returns:
            DoneEvent with the history id, or ErrorEvent if either write failed
        """
        record = ResponseHistoryRecord(
            user_id=user_id,
            original_message=request.original_message,
            context=request.context.to_record(),
            variants=variants,
            model=model,
        )

        history_id: Optional[str] = None
        try:
            try:
                history_id = await self.history_repository.create(record)
            except RepositoryError as e:
                raise PersistenceError(f"Failed to write history: {e}", stage="history", original_error=e)
            await self.quota_service.commit_usage(user_id)
        except PersistenceError as e:
            self.logger.error(
                "Persistence failed after delivery",
                user_id=user_id,
                stage=e.stage,
                history_id=history_id,
                variant_count=len(variants),
                error=str(e),
                reconciliation_required=True
            )
            return ErrorEvent(message=ERROR_MESSAGES["PERSISTENCE_FAILED"])

        self.log_operation(
            "settle_success",
            user_id=user_id,
            history_id=history_id,
            mean_confidence=record.mean_confidence
        )
        return DoneEvent(history_id=history_id)

    def settle_failure(self, user_id: UserId, error: GenerationError) -> ErrorEvent:
        """Generation failed upstream: nothing is written."""
        self.logger.error(
            "Generation failed",
            user_id=user_id,
            variant_index=error.variant_index,
            error=str(error)
        )
        return ErrorEvent(message=ERROR_MESSAGES["GENERATION_FAILED"])
