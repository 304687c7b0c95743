"""Unit tests for ResponseAccumulator."""

import pytest

from reply_stream.models.events import (
    CompleteEvent, ContentEvent, DoneEvent, StartEvent, VariantMetadata
)
from reply_stream.services.response_accumulator import (
    AccumulatorStateError, ResponseAccumulator
)


def meta(confidence, tone="professional"):
    return VariantMetadata(tone=tone, length="standard", confidence=confidence, reasoning="r")


INTERLEAVED = [
    StartEvent(variant_index=0),
    StartEvent(variant_index=1),
    ContentEvent(variant_index=1, text_fragment="Hi "),
    ContentEvent(variant_index=0, text_fragment="Hello "),
    ContentEvent(variant_index=1, text_fragment="there"),
    CompleteEvent(variant_index=1, metadata=meta(0.7, "casual")),
    ContentEvent(variant_index=0, text_fragment="Sam"),
    CompleteEvent(variant_index=0, metadata=meta(0.9)),
]


def fold(events, expected=2):
    accumulator = ResponseAccumulator(expected)
    for event in events:
        accumulator.apply(event)
    return accumulator


class TestResponseAccumulator:
    """Fold semantics."""

    def test_reconstructs_interleaved_variants(self):
        variants = fold(INTERLEAVED).result()

        assert [v.variant_index for v in variants] == [0, 1]
        assert variants[0].text == "Hello Sam"
        assert variants[1].text == "Hi there"
        assert variants[1].tone == "casual"
        assert variants[0].confidence == 0.9

    def test_is_idempotent(self):
        assert fold(INTERLEAVED).result() == fold(INTERLEAVED).result()

    def test_result_requires_every_variant_complete(self):
        accumulator = fold([StartEvent(variant_index=0)], expected=1)
        assert accumulator.is_complete is False
        with pytest.raises(AccumulatorStateError):
            accumulator.result()

    def test_complete_keeps_text(self):
        variants = fold([
            StartEvent(variant_index=0),
            ContentEvent(variant_index=0, text_fragment="abc"),
            CompleteEvent(variant_index=0, metadata=meta(0.8)),
        ], expected=1).result()

        assert variants[0].text == "abc"
        assert variants[0].completed is True

    def test_terminal_events_are_ignored(self):
        accumulator = fold(INTERLEAVED + [DoneEvent(history_id="h1")])
        assert accumulator.is_complete

    def test_content_before_start_is_a_bug(self):
        with pytest.raises(AccumulatorStateError):
            fold([ContentEvent(variant_index=0, text_fragment="x")])

    def test_content_after_complete_is_a_bug(self):
        with pytest.raises(AccumulatorStateError):
            fold([
                StartEvent(variant_index=0),
                CompleteEvent(variant_index=0, metadata=meta(0.8)),
                ContentEvent(variant_index=0, text_fragment="late"),
            ])

    def test_double_start_is_a_bug(self):
        with pytest.raises(AccumulatorStateError):
            fold([StartEvent(variant_index=0), StartEvent(variant_index=0)])
