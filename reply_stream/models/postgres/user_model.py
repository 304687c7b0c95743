"""
User PostgreSQL Model
=====================

Only the profile columns read by response generation are mapped here.
"""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from ..base_model import BasePostgresModel, TimestampMixin
from ..records import UserProfile


class User(BasePostgresModel, TimestampMixin):
    """Freelancer account profile"""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    style_profile: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    def to_record(self) -> UserProfile:
        return UserProfile(
            user_id=self.id,
            first_name=self.first_name,
            style_profile=self.style_profile,
        )
