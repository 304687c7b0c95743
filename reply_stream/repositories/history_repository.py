"""
Response History Repository
===========================

Write side of the response history. Listing, editing and deleting history
belong to the CRUD surface of the product, not this service.
"""

from abc import abstractmethod
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from reply_stream.models.postgres.response_history_model import ResponseHistory
from reply_stream.models.records import AccumulatedVariant, ResponseHistoryRecord
from reply_stream.models.types import HistoryId

from .base_repository import BaseRepository, SQLRepository
from .exceptions import RepositoryError


class HistoryRepository(BaseRepository):
    """Storage contract for response history"""

    @abstractmethod
    async def create(self, record: ResponseHistoryRecord) -> HistoryId:
        """
        Persist a completed generation.

        Returns:
            Identifier of the new history row

        Raises:
            RepositoryError: If the write fails
        """


class SQLHistoryRepository(SQLRepository, HistoryRepository):
    """Response history on the ``response_history`` table"""

    async def create(self, record: ResponseHistoryRecord) -> HistoryId:
        row = ResponseHistory(
            user_id=record.user_id,
            original_message=record.original_message,
            context=record.context,
            generated_options=record.generated_options(),
            openai_model=record.model,
            confidence_score=record.mean_confidence,
            created_at=record.created_at,
            updated_at=record.created_at,
        )

        try:
            async with self._timed_operation("create_history", user_id=record.user_id):
                async with self._session() as session:
                    session.add(row)
                    await session.commit()
                    return row.id
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to write response history",
                user_id=record.user_id,
                error=str(e)
            )
            raise RepositoryError(f"Failed to write response history: {e}", original_error=e)

    async def get_by_id(self, history_id: HistoryId) -> Optional[ResponseHistoryRecord]:
        """Read a stored generation back as a domain record."""
        try:
            async with self._session() as session:
                row = await session.get(ResponseHistory, history_id)
                return _to_record(row) if row is not None else None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to read response history: {e}", original_error=e)


def _to_record(row: ResponseHistory) -> ResponseHistoryRecord:
    variants = [
        AccumulatedVariant(
            variant_index=index,
            text=option.get("content", ""),
            tone=option.get("tone", ""),
            length=option.get("length", ""),
            confidence=option.get("confidence", 0.0),
            reasoning=option.get("reasoning", ""),
            completed=True,
        )
        for index, option in enumerate(row.generated_options)
    ]
    return ResponseHistoryRecord(
        user_id=row.user_id,
        original_message=row.original_message,
        context=row.context,
        variants=variants,
        model=row.openai_model,
        created_at=row.created_at,
    )
