"""
Service layer: admission checks and the streaming generation pipeline.
"""

from reply_stream.services.exceptions import ServiceError, GenerationError, PersistenceError
from reply_stream.services.rate_limit_service import RateLimiterService
from reply_stream.services.quota_service import QuotaService
from reply_stream.services.variant_generator import (
    VariantGenerator, VariantStream, extract_metadata
)
from reply_stream.services.stream_multiplexer import StreamMultiplexer
from reply_stream.services.response_accumulator import ResponseAccumulator, AccumulatorStateError
from reply_stream.services.settlement_service import SettlementService
from reply_stream.services.response_stream_service import ResponseStreamService
from reply_stream.services.service_container import ServiceContainer

__all__ = [
    "ServiceError",
    "GenerationError",
    "PersistenceError",
    "RateLimiterService",
    "QuotaService",
    "VariantGenerator",
    "VariantStream",
    "extract_metadata",
    "StreamMultiplexer",
    "ResponseAccumulator",
    "AccumulatorStateError",
    "SettlementService",
    "ResponseStreamService",
    "ServiceContainer",
]
