"""
Utilities package for Reply Stream Service.
"""

from reply_stream.utils.logger import setup_logging, get_logger, bind_context
from reply_stream.utils.metrics import MetricsCollector, StreamOutcome

__all__ = [
    "setup_logging",
    "get_logger",
    "bind_context",
    "MetricsCollector",
    "StreamOutcome",
]
