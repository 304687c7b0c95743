"""
Stream Multiplexer

Runs every variant stream concurrently and interleaves their events into a
single sequence. Each variant is driven by its own producer task that puts
``start``, ``content*`` and ``complete`` onto one shared FIFO queue, so
per-variant order holds while variants interleave in arrival order. A slow
variant only delays its own events.

The sequence ends after the last ``complete``; terminal events belong to
settlement. Any variant failure cancels the rest and raises GenerationError.
Closing the sequence early cancels all producers.
"""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence, Union

import structlog

from reply_stream.models.events import (
    CompleteEvent, ContentEvent, StartEvent, VariantEvent
)
from reply_stream.services.exceptions import GenerationError
from reply_stream.services.variant_generator import VariantStream

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _VariantFailure:
    variant_index: int
    error: BaseException


_QueueItem = Union[StartEvent, ContentEvent, CompleteEvent, _VariantFailure]


class StreamMultiplexer:
    """Fan-in of concurrent variant streams"""

    def __init__(self, stall_timeout: Optional[float] = None):
        self.stall_timeout = stall_timeout

    async def multiplex(self, streams: Sequence[VariantStream]) -> AsyncIterator[VariantEvent]:
        """
        Yield variant events as they are produced.

        Raises:
            GenerationError: If any variant fails or stalls
        """
        queue: "asyncio.Queue[_QueueItem]" = asyncio.Queue()
        tasks: List[asyncio.Task] = [
            asyncio.create_task(self._produce(stream, queue), name=f"variant-{stream.index}")
            for stream in streams
        ]
        pending = len(tasks)

        try:
            while pending:
                item = await queue.get()

                if isinstance(item, _VariantFailure):
                    raise GenerationError(
                        f"Variant {item.variant_index} failed: {item.error}",
                        variant_index=item.variant_index,
                        original_error=item.error if isinstance(item.error, Exception) else None
                    )

                if isinstance(item, CompleteEvent):
                    pending -= 1

                yield item
        finally:
            await self._cancel(tasks)

    async def _produce(self, stream: VariantStream, queue: "asyncio.Queue[_QueueItem]") -> None:
        try:
            await queue.put(StartEvent(variant_index=stream.index))

            fragments = stream.fragments()
            try:
                while True:
                    try:
                        fragment = await self._next_fragment(fragments)
                    except StopAsyncIteration:
                        break
                    await queue.put(ContentEvent(variant_index=stream.index, text_fragment=fragment))
            finally:
                await fragments.aclose()

            await queue.put(CompleteEvent(variant_index=stream.index, metadata=stream.metadata()))

        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            logger.error("Variant stalled", variant_index=stream.index, stall_timeout=self.stall_timeout)
            await queue.put(_VariantFailure(
                stream.index, TimeoutError(f"no output for {self.stall_timeout}s")
            ))
        except Exception as e:
            logger.error(
                "Variant generation failed",
                variant_index=stream.index,
                error_type=type(e).__name__,
                error=str(e)
            )
            await queue.put(_VariantFailure(stream.index, e))

    async def _next_fragment(self, fragments: AsyncIterator[str]) -> str:
        if self.stall_timeout is None:
            return await fragments.__anext__()
        return await asyncio.wait_for(fragments.__anext__(), timeout=self.stall_timeout)

    @staticmethod
    async def _cancel(tasks: List[asyncio.Task]) -> None:
        cancelled = 0
        for task in tasks:
            if not task.done():
                task.cancel()
                cancelled += 1
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if cancelled:
            logger.info("Cancelled unfinished variants", cancelled=cancelled)
