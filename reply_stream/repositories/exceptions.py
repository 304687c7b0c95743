"""
Repository errors. Drivers' own exceptions (SQLAlchemy, redis) never
leave the repository layer; they are wrapped in RepositoryError.
"""

from typing import Any, Dict, Optional


class RepositoryError(Exception):
    """A storage read or write failed"""

    def __init__(
            self,
            message: str,
            original_error: Optional[Exception] = None,
            context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.context = context or {}


class EntityNotFoundError(RepositoryError):
    """A row that must exist for a write is missing"""

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            context={"entity_type": entity_type, "entity_id": entity_id}
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
