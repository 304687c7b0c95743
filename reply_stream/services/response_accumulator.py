"""
Response Accumulator

Server-side mirror of what the client rebuilds from the wire. It must be fed
the very event objects that are written to the connection, in the same
order, so the persisted text is exactly the delivered text.
"""

from typing import Dict, List

from reply_stream.config.constants import PLACEHOLDER_CONFIDENCE
from reply_stream.models.events import (
    CompleteEvent, ContentEvent, StartEvent, StreamEvent
)
from reply_stream.models.records import AccumulatedVariant


class AccumulatorStateError(RuntimeError):
    """Events arrived out of the start -> content* -> complete order"""


class ResponseAccumulator:
    """Pure fold of variant events into AccumulatedVariant records"""

    def __init__(self, expected_variants: int):
        self.expected_variants = expected_variants
        self._variants: Dict[int, AccumulatedVariant] = {}

    def apply(self, event: StreamEvent) -> None:
        if isinstance(event, StartEvent):
            if event.variant_index in self._variants:
                raise AccumulatorStateError(f"variant {event.variant_index} started twice")
            self._variants[event.variant_index] = AccumulatedVariant(
                variant_index=event.variant_index,
                confidence=PLACEHOLDER_CONFIDENCE,
            )
        elif isinstance(event, ContentEvent):
            self._open_variant(event.variant_index).text += event.text_fragment
        elif isinstance(event, CompleteEvent):
            self._open_variant(event.variant_index).apply_metadata(event.metadata)
        # terminal events carry no variant state

    def _open_variant(self, index: int) -> AccumulatedVariant:
        variant = self._variants.get(index)
        if variant is None:
            raise AccumulatorStateError(f"variant {index} has no start event")
        if variant.completed:
            raise AccumulatorStateError(f"variant {index} already completed")
        return variant

    @property
    def completed_count(self) -> int:
        return sum(1 for v in self._variants.values() if v.completed)

    @property
    def is_complete(self) -> bool:
        return (
            len(self._variants) == self.expected_variants
            and self.completed_count == self.expected_variants
        )

    def result(self) -> List[AccumulatedVariant]:
        """Finalized variants ordered by index."""
        if not self.is_complete:
            raise AccumulatorStateError(
                f"{self.completed_count} of {self.expected_variants} variants completed"
            )
        return [self._variants[i] for i in sorted(self._variants)]
