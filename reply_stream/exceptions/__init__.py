"""
Exception hierarchy and FastAPI error handlers.
"""

from reply_stream.exceptions.base_exceptions import (
    ReplyStreamException,
    AuthenticationError,
    QuotaExceededError,
    QuotaNotFoundError,
    RateLimitExceededError,
    ExternalServiceError,
    InternalServerError,
    setup_exception_handlers,
)

__all__ = [
    "ReplyStreamException",
    "AuthenticationError",
    "QuotaExceededError",
    "QuotaNotFoundError",
    "RateLimitExceededError",
    "ExternalServiceError",
    "InternalServerError",
    "setup_exception_handlers",
]
