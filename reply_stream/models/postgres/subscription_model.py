"""
Subscription PostgreSQL Model
=============================

Per-user billing tier and monthly usage counter. The counter is reset by
the billing-cycle job, which lives outside this service.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..base_model import BasePostgresModel, TimestampMixin
from ..records import QuotaRecord


class Subscription(BasePostgresModel, TimestampMixin):
    """User subscription and usage quota"""
    __tablename__ = "subscriptions"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tier: Mapped[str] = mapped_column(String(32), default="free")
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    monthly_limit: Mapped[int] = mapped_column(Integer, default=10, nullable=False)

    def to_record(self) -> QuotaRecord:
        return QuotaRecord(
            user_id=self.user_id,
            tier=self.tier,
            usage_count=self.usage_count,
            monthly_limit=self.monthly_limit,
        )
