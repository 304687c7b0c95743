"""Unit tests for QuotaService."""

from unittest.mock import AsyncMock

import pytest

from reply_stream.exceptions import (
    InternalServerError, QuotaExceededError, QuotaNotFoundError
)
from reply_stream.models.records import QuotaRecord
from reply_stream.repositories.exceptions import RepositoryError
from reply_stream.services.exceptions import PersistenceError
from reply_stream.services.quota_service import QuotaService

from tests.fakes import InMemoryQuotaRepository


class TestReserve:
    """The pre-generation quota gate."""

    @pytest.mark.asyncio
    async def test_returns_record_below_limit(self):
        repo = InMemoryQuotaRepository([QuotaRecord("u", "free", 4, 5)])
        record = await QuotaService(repo).reserve("u")

        assert record.remaining == 1

    @pytest.mark.asyncio
    async def test_rejects_at_limit(self):
        repo = InMemoryQuotaRepository([QuotaRecord("u", "free", 5, 5)])

        with pytest.raises(QuotaExceededError) as exc_info:
            await QuotaService(repo).reserve("u")

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"usage_count": 5, "monthly_limit": 5}

    @pytest.mark.asyncio
    async def test_missing_record_is_not_found(self):
        with pytest.raises(QuotaNotFoundError) as exc_info:
            await QuotaService(InMemoryQuotaRepository()).reserve("ghost")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_store_failure_is_internal_error(self):
        repo = InMemoryQuotaRepository()
        repo.get = AsyncMock(side_effect=RepositoryError("db down"))

        with pytest.raises(InternalServerError):
            await QuotaService(repo).reserve("u")

    @pytest.mark.asyncio
    async def test_reserve_does_not_increment(self):
        repo = InMemoryQuotaRepository([QuotaRecord("u", "free", 1, 5)])
        await QuotaService(repo).reserve("u")

        assert repo.records["u"].usage_count == 1


class TestCommitUsage:
    """The post-generation increment."""

    @pytest.mark.asyncio
    async def test_increments_by_exactly_one(self):
        repo = InMemoryQuotaRepository([QuotaRecord("u", "free", 1, 5)])

        assert await QuotaService(repo).commit_usage("u") == 2
        assert repo.records["u"].usage_count == 2

    @pytest.mark.asyncio
    async def test_failure_is_persistence_error(self):
        repo = InMemoryQuotaRepository([QuotaRecord("u", "free", 1, 5)], fail_increment=True)

        with pytest.raises(PersistenceError) as exc_info:
            await QuotaService(repo).commit_usage("u")

        assert exc_info.value.stage == "quota"
