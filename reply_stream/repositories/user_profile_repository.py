"""
User Profile Repository
=======================
"""

from abc import abstractmethod
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from reply_stream.models.postgres.user_model import User
from reply_stream.models.records import UserProfile
from reply_stream.models.types import UserId

from .base_repository import BaseRepository, SQLRepository
from .exceptions import RepositoryError


class UserProfileRepository(BaseRepository):
    """Storage contract for user profiles"""

    @abstractmethod
    async def get(self, user_id: UserId) -> Optional[UserProfile]:
        """Profile for the user, or None"""


class SQLUserProfileRepository(SQLRepository, UserProfileRepository):
    """Profiles on the ``users`` table"""

    async def get(self, user_id: UserId) -> Optional[UserProfile]:
        try:
            async with self._timed_operation("get_profile", user_id=user_id):
                async with self._session() as session:
                    user = await session.get(User, user_id)
                    return user.to_record() if user else None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to read user profile: {e}", original_error=e)
