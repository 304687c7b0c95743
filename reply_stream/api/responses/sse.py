"""
Server-Sent Events framing.
"""

from contextlib import aclosing
from typing import AsyncGenerator, AsyncIterator

from reply_stream.models.events import StreamEvent


def format_sse(event: StreamEvent) -> str:
    """One event as a ``data:`` line followed by a blank line."""
    return f"data: {event.to_json()}\n\n"


async def sse_body(events: AsyncGenerator[StreamEvent, None]) -> AsyncIterator[str]:
    """
    Serialize events onto the connection in emission order.

    Closing this body closes ``events`` at once, so a disconnect cancels
    the pipeline's producers before the next loop turn.
    """
    async with aclosing(events) as stream:
        async for event in stream:
            yield format_sse(event)
