"""Service layer exceptions"""

from datetime import datetime, timezone
from typing import Optional


class ServiceError(Exception):
    """Base exception for service layer errors"""

    def __init__(
            self,
            message: str,
            original_error: Optional[Exception] = None,
            error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.original_error = original_error
        self.error_code = error_code or "SERVICE_ERROR"
        self.timestamp = datetime.now(timezone.utc)


class GenerationError(ServiceError):
    """A variant failed or stalled; the whole generation call is void"""

    def __init__(
            self,
            message: str,
            variant_index: Optional[int] = None,
            original_error: Optional[Exception] = None
    ):
        super().__init__(message, original_error=original_error, error_code="GENERATION_FAILED")
        self.variant_index = variant_index


class PersistenceError(ServiceError):
    """Writing history or committing usage failed after delivery"""

    def __init__(
            self,
            message: str,
            stage: Optional[str] = None,
            original_error: Optional[Exception] = None
    ):
        super().__init__(message, original_error=original_error, error_code="PERSISTENCE_FAILED")
        self.stage = stage
