"""
Metrics collection for the streaming pipeline.

Prometheus collectors live on a private registry so that several app
instances (tests) never collide on the global default registry.
"""

from typing import Optional

from prometheus_client import (
    CollectorRegistry, Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
)

from reply_stream.utils.logger import get_logger
from reply_stream.config.constants import SERVICE_NAME

logger = get_logger(__name__)


class StreamOutcome:
    """Label values for finished generation streams."""
    DONE = "done"
    GENERATION_ERROR = "generation_error"
    PERSISTENCE_ERROR = "persistence_error"
    CANCELLED = "cancelled"


class MetricsCollector:
    """
    Prometheus metrics for the reply streaming endpoint.

    When disabled every recording method is a no-op so callers never need
    to branch on configuration.
    """

    def __init__(self, enabled: bool = True, registry: Optional[CollectorRegistry] = None):
        self.enabled = enabled
        self.registry = registry or CollectorRegistry()

        self.streams_started = Counter(
            "reply_stream_streams_started_total",
            "Generation streams opened",
            ["tier"],
            registry=self.registry
        )
        self.streams_finished = Counter(
            "reply_stream_streams_finished_total",
            "Generation streams closed, by outcome",
            ["outcome"],
            registry=self.registry
        )
        self.stream_duration = Histogram(
            "reply_stream_stream_duration_seconds",
            "Wall time from first event to terminal event",
            ["outcome"],
            registry=self.registry
        )
        self.fragments_streamed = Counter(
            "reply_stream_fragments_total",
            "Content fragments written to clients",
            registry=self.registry
        )
        self.rate_limit_rejections = Counter(
            "reply_stream_rate_limit_rejections_total",
            "Requests rejected by the sliding-window limiter",
            ["route"],
            registry=self.registry
        )
        self.quota_rejections = Counter(
            "reply_stream_quota_rejections_total",
            "Requests rejected by the quota gate",
            ["reason"],
            registry=self.registry
        )

        logger.info("Metrics collector initialized", enabled=enabled, service=SERVICE_NAME)

    def record_stream_started(self, tier: str) -> None:
        if self.enabled:
            self.streams_started.labels(tier=tier).inc()

    def record_stream_finished(self, outcome: str, duration_seconds: float) -> None:
        if self.enabled:
            self.streams_finished.labels(outcome=outcome).inc()
            self.stream_duration.labels(outcome=outcome).observe(duration_seconds)

    def record_fragment(self) -> None:
        if self.enabled:
            self.fragments_streamed.inc()

    def record_rate_limited(self, route: str) -> None:
        if self.enabled:
            self.rate_limit_rejections.labels(route=route).inc()

    def record_quota_rejected(self, reason: str) -> None:
        if self.enabled:
            self.quota_rejections.labels(reason=reason).inc()

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)

    content_type = CONTENT_TYPE_LATEST
