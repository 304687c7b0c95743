"""
Response Stream Service

The generation pipeline behind the streaming endpoint. Admission checks
(rate limit, auth, quota) happen before this runs; from here on every
outcome is expressed as events, ending in exactly one ``done`` or ``error``.

Each variant event is handed to two sinks: the accumulator here and the
wire writer that iterates this generator. Both see the same object.

Once every variant has completed, settlement runs in a task owned by the
service rather than the connection. A client that leaves after that point
still gets one history record and one usage increment.
"""

import asyncio
import time
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Optional, Set, Tuple

from reply_stream.config.constants import ERROR_MESSAGES, PREMIUM_TIER
from reply_stream.models.events import (
    ContentEvent, DoneEvent, ErrorEvent, StreamEvent, TerminalEvent
)
from reply_stream.models.records import QuotaRecord
from reply_stream.models.schemas import GenerationRequest
from reply_stream.models.types import UserId
from reply_stream.repositories.exceptions import RepositoryError
from reply_stream.repositories.user_profile_repository import UserProfileRepository
from reply_stream.services.base_service import BaseService
from reply_stream.services.exceptions import GenerationError
from reply_stream.services.response_accumulator import ResponseAccumulator
from reply_stream.services.settlement_service import SettlementService
from reply_stream.services.stream_multiplexer import StreamMultiplexer
from reply_stream.services.variant_generator import VariantGenerator
from reply_stream.utils.metrics import MetricsCollector, StreamOutcome


class ResponseStreamService(BaseService):
    """Runs one generation request from first variant to terminal event"""

    def __init__(
            self,
            generator: VariantGenerator,
            multiplexer: StreamMultiplexer,
            settlement: SettlementService,
            profile_repository: UserProfileRepository,
            metrics: Optional[MetricsCollector] = None
    ):
        super().__init__()
        self.generator = generator
        self.multiplexer = multiplexer
        self.settlement = settlement
        self.profile_repository = profile_repository
        self.metrics = metrics or MetricsCollector(enabled=False)
        self._settlements: Set["asyncio.Task[TerminalEvent]"] = set()

    async def enrich(
            self,
            user_id: UserId,
            request: GenerationRequest,
            tier: str
    ) -> Tuple[GenerationRequest, Optional[Dict[str, Any]]]:
        """
        Fill the sender name from the user's profile.

        Returns:
            The request to generate and persist, and the style profile
            (premium tier only)
        """
        try:
            profile = await self.profile_repository.get(user_id)
        except RepositoryError as e:
            self.logger.warning("User profile unavailable", user_id=user_id, error=str(e))
            return request, None

        if profile is None:
            return request, None

        if profile.first_name:
            request = request.with_context(user_name=profile.first_name)

        style_profile = profile.style_profile if tier == PREMIUM_TIER else None
        return request, style_profile

    async def stream(
            self,
            user_id: UserId,
            request: GenerationRequest,
            quota: QuotaRecord
    ) -> AsyncIterator[StreamEvent]:
        """Yield every event for one request. The last event is terminal."""
        started = time.monotonic()
        outcome = StreamOutcome.CANCELLED
        self.metrics.record_stream_started(quota.tier)
        accumulator: Optional[ResponseAccumulator] = None
        settling: Optional["asyncio.Task[TerminalEvent]"] = None

        try:
            request, style_profile = await self.enrich(user_id, request, quota.tier)
            streams = self.generator.plan(request, style_profile)
            accumulator = ResponseAccumulator(expected_variants=len(streams))

            try:
                async with aclosing(self.multiplexer.multiplex(streams)) as events:
                    async for event in events:
                        accumulator.apply(event)
                        if isinstance(event, ContentEvent):
                            self.metrics.record_fragment()
                        yield event
            except GenerationError as e:
                outcome = StreamOutcome.GENERATION_ERROR
                yield self.settlement.settle_failure(user_id, e)
                return

            settling = self._start_settlement(user_id, request, accumulator)
            try:
                terminal = await asyncio.shield(settling)
            except asyncio.CancelledError:
                self.logger.info("Client left during settlement, settlement continues", user_id=user_id)
                raise

            outcome = (
                StreamOutcome.DONE if isinstance(terminal, DoneEvent)
                else StreamOutcome.PERSISTENCE_ERROR
            )
            yield terminal
        except GeneratorExit:
            # closed at the yield of the last ``complete``: content is fully delivered
            if settling is None and accumulator is not None and accumulator.is_complete:
                self.logger.info("Client left after the last variant, settling in background", user_id=user_id)
                self._start_settlement(user_id, request, accumulator)
            raise
        except Exception as e:
            outcome = StreamOutcome.GENERATION_ERROR
            self.logger.exception("Unexpected pipeline failure", user_id=user_id, error=str(e))
            yield ErrorEvent(message=ERROR_MESSAGES["GENERATION_FAILED"])
        finally:
            duration = time.monotonic() - started
            self.metrics.record_stream_finished(outcome, duration)
            if outcome == StreamOutcome.CANCELLED:
                self.logger.info(
                    "Stream closed before terminal event",
                    user_id=user_id,
                    duration_seconds=round(duration, 3)
                )

    def _start_settlement(
            self,
            user_id: UserId,
            request: GenerationRequest,
            accumulator: ResponseAccumulator
    ) -> "asyncio.Task[TerminalEvent]":
        task = asyncio.create_task(
            self.settlement.settle_success(
                user_id, request, accumulator.result(), self.generator.model_name
            ),
            name=f"settle-{user_id}"
        )
        self._settlements.add(task)
        task.add_done_callback(self._settlement_finished)
        return task

    def _settlement_finished(self, task: "asyncio.Task[TerminalEvent]") -> None:
        self._settlements.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(
                "Settlement failed",
                error=str(task.exception()),
                reconciliation_required=True
            )

    @property
    def pending_settlements(self) -> int:
        return len(self._settlements)

    async def drain(self) -> None:
        """Wait for settlements still running after their connection closed."""
        if self._settlements:
            self.logger.info("Waiting for pending settlements", pending=len(self._settlements))
            await asyncio.gather(*self._settlements, return_exceptions=True)
