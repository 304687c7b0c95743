"""
Repositories for rate limiting, quotas, profiles and response history.
"""

from .exceptions import RepositoryError, EntityNotFoundError
from .rate_limit_repository import (
    RateLimitResult, RateLimitStore, InMemoryRateLimitStore, RedisRateLimitStore
)
from .quota_repository import QuotaRepository, SQLQuotaRepository
from .history_repository import HistoryRepository, SQLHistoryRepository
from .user_profile_repository import UserProfileRepository, SQLUserProfileRepository

__all__ = [
    "RepositoryError",
    "EntityNotFoundError",
    "RateLimitResult",
    "RateLimitStore",
    "InMemoryRateLimitStore",
    "RedisRateLimitStore",
    "QuotaRepository",
    "SQLQuotaRepository",
    "HistoryRepository",
    "SQLHistoryRepository",
    "UserProfileRepository",
    "SQLUserProfileRepository",
]
