"""
Response History PostgreSQL Model
=================================

One row per completed generation. Rows are never updated by this service.
"""

import uuid
from typing import Any, Dict, List

from sqlalchemy import JSON, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base_model import BasePostgresModel, TimestampMixin


class ResponseHistory(BasePostgresModel, TimestampMixin):
    """Persisted generation result"""
    __tablename__ = "response_history"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    original_message: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    generated_options: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)
    openai_model: Mapped[str] = mapped_column(String(100), nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index("idx_response_history_user_created", "user_id", "created_at"),
    )
