"""
Base Service Class

Common logging helpers shared by the service layer.
"""

from abc import ABC
from datetime import datetime, timezone
from typing import Optional

import structlog

from reply_stream.models.types import UserId


class BaseService(ABC):
    """Abstract base class for all services"""

    def __init__(self):
        self.logger = structlog.get_logger(self.__class__.__name__)
        self.service_name = self.__class__.__name__

    def log_operation(
            self,
            operation: str,
            user_id: Optional[UserId] = None,
            **kwargs
    ) -> None:
        """Log service operation with standard fields"""
        log_data = {
            "service": self.service_name,
            "operation": operation,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **kwargs
        }

        if user_id:
            log_data["user_id"] = user_id

        self.logger.info("Service operation", **log_data)

