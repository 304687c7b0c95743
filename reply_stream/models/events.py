"""
Stream event models.

Every event after ``start`` carries its variant index so a client can
rebuild each variant regardless of how variants interleave on the wire.
Field aliases are the JSON keys written inside each ``data:`` line.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class VariantMetadata(BaseModel):
    """Descriptive metadata attached to a finished variant."""

    model_config = ConfigDict(frozen=True)

    tone: str = ""
    length: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""


class _Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class StartEvent(_Event):
    type: Literal["start"] = "start"
    variant_index: int = Field(..., alias="responseIndex", ge=0)


class ContentEvent(_Event):
    type: Literal["content"] = "content"
    variant_index: int = Field(..., alias="responseIndex", ge=0)
    text_fragment: str = Field(..., alias="content")


class CompleteEvent(_Event):
    type: Literal["complete"] = "complete"
    variant_index: int = Field(..., alias="responseIndex", ge=0)
    metadata: VariantMetadata


class DoneEvent(_Event):
    type: Literal["done"] = "done"
    history_id: Optional[str] = Field(default=None, alias="historyId")


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    message: str = Field(..., alias="error")


VariantEvent = Union[StartEvent, ContentEvent, CompleteEvent]
TerminalEvent = Union[DoneEvent, ErrorEvent]

StreamEvent = Annotated[
    Union[StartEvent, ContentEvent, CompleteEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]

_stream_event_adapter = TypeAdapter(StreamEvent)


def parse_stream_event(payload: Union[str, bytes]) -> StreamEvent:
    """Parse the JSON body of one ``data:`` line back into an event."""
    return _stream_event_adapter.validate_json(payload)


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (DoneEvent, ErrorEvent))
