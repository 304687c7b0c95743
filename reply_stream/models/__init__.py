"""
Data models: request schemas, stream events, domain records and ORM tables.
"""

from reply_stream.models.events import (
    StreamEvent, StartEvent, ContentEvent, CompleteEvent, DoneEvent, ErrorEvent,
    VariantMetadata, parse_stream_event,
)
from reply_stream.models.records import (
    QuotaRecord, UserProfile, AccumulatedVariant, ResponseHistoryRecord
)
from reply_stream.models.schemas import GenerationRequest, ResponseContext

__all__ = [
    "StreamEvent",
    "StartEvent",
    "ContentEvent",
    "CompleteEvent",
    "DoneEvent",
    "ErrorEvent",
    "VariantMetadata",
    "parse_stream_event",
    "QuotaRecord",
    "UserProfile",
    "AccumulatedVariant",
    "ResponseHistoryRecord",
    "GenerationRequest",
    "ResponseContext",
]
