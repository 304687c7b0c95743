"""Unit tests for SettlementService."""

import pytest

from reply_stream.models.events import DoneEvent, ErrorEvent
from reply_stream.models.records import AccumulatedVariant, QuotaRecord
from reply_stream.services.exceptions import GenerationError
from reply_stream.services.quota_service import QuotaService
from reply_stream.services.settlement_service import SettlementService

from tests.fakes import InMemoryHistoryRepository, InMemoryQuotaRepository


def variants(*confidences):
    return [
        AccumulatedVariant(variant_index=i, text=f"reply {i}", tone="t", length="l",
                           confidence=c, reasoning="r", completed=True)
        for i, c in enumerate(confidences)
    ]


@pytest.fixture
def quota_repo():
    return InMemoryQuotaRepository([QuotaRecord("user-1", "free", 3, 10)])


class TestSettleSuccess:
    """History write and usage commit."""

    @pytest.mark.asyncio
    async def test_writes_history_and_increments_usage(self, generation_request, quota_repo):
        history = InMemoryHistoryRepository()
        settlement = SettlementService(history, QuotaService(quota_repo))

        event = await settlement.settle_success(
            "user-1", generation_request, variants(0.9, 0.7, 0.8), "gpt-4"
        )

        assert isinstance(event, DoneEvent)
        record = history.records[event.history_id]
        assert record.mean_confidence == 0.8
        assert record.model == "gpt-4"
        assert [o["content"] for o in record.generated_options()] == ["reply 0", "reply 1", "reply 2"]
        assert record.context["messageType"] == "update"
        assert quota_repo.records["user-1"].usage_count == 4

    @pytest.mark.asyncio
    async def test_history_failure_emits_error_and_skips_quota(self, generation_request, quota_repo):
        settlement = SettlementService(InMemoryHistoryRepository(fail=True), QuotaService(quota_repo))

        event = await settlement.settle_success("user-1", generation_request, variants(0.9), "m")

        assert isinstance(event, ErrorEvent)
        assert event.message == "Failed to save response history"
        assert quota_repo.records["user-1"].usage_count == 3

    @pytest.mark.asyncio
    async def test_quota_failure_after_history_emits_error(self, generation_request):
        quota_repo = InMemoryQuotaRepository([QuotaRecord("user-1", "free", 3, 10)], fail_increment=True)
        history = InMemoryHistoryRepository()
        settlement = SettlementService(history, QuotaService(quota_repo))

        event = await settlement.settle_success("user-1", generation_request, variants(0.9), "m")

        assert isinstance(event, ErrorEvent)
        assert len(history.records) == 1


class TestSettleFailure:
    """Upstream generation failure."""

    def test_emits_error_without_writes(self, quota_repo):
        history = InMemoryHistoryRepository()
        settlement = SettlementService(history, QuotaService(quota_repo))

        event = settlement.settle_failure("user-1", GenerationError("boom", variant_index=1))

        assert event.message == "An error occurred during streaming"
        assert history.records == {}
        assert quota_repo.records["user-1"].usage_count == 3
