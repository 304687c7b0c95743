"""SQL repositories against a throwaway SQLite database."""

import pytest
import pytest_asyncio

from reply_stream.database.postgresdb import PostgresDatabase
from reply_stream.models.postgres import Subscription, User
from reply_stream.models.records import AccumulatedVariant, ResponseHistoryRecord
from reply_stream.repositories import (
    EntityNotFoundError,
    SQLHistoryRepository,
    SQLQuotaRepository,
    SQLUserProfileRepository,
)


@pytest_asyncio.fixture
async def database(tmp_path):
    db = PostgresDatabase(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_tables()
    async with db.session_factory() as session:
        session.add(Subscription(user_id="user-1", tier="premium", usage_count=2, monthly_limit=50))
        session.add(User(id="user-1", first_name="Alex", style_profile={"tone": "warm"}))
        await session.commit()
    yield db
    await db.close()


class TestSQLQuotaRepository:

    @pytest.mark.asyncio
    async def test_get(self, database):
        record = await SQLQuotaRepository(database.session_factory).get("user-1")

        assert record.tier == "premium"
        assert record.usage_count == 2
        assert record.monthly_limit == 50

    @pytest.mark.asyncio
    async def test_get_missing(self, database):
        assert await SQLQuotaRepository(database.session_factory).get("nobody") is None

    @pytest.mark.asyncio
    async def test_increment_usage(self, database):
        repo = SQLQuotaRepository(database.session_factory)

        assert await repo.increment_usage("user-1") == 3
        assert (await repo.get("user-1")).usage_count == 3

    @pytest.mark.asyncio
    async def test_increment_missing(self, database):
        with pytest.raises(EntityNotFoundError):
            await SQLQuotaRepository(database.session_factory).increment_usage("nobody")


class TestSQLUserProfileRepository:

    @pytest.mark.asyncio
    async def test_get(self, database):
        profile = await SQLUserProfileRepository(database.session_factory).get("user-1")

        assert profile.first_name == "Alex"
        assert profile.style_profile == {"tone": "warm"}

    @pytest.mark.asyncio
    async def test_get_missing(self, database):
        assert await SQLUserProfileRepository(database.session_factory).get("nobody") is None


class TestSQLHistoryRepository:

    @pytest.mark.asyncio
    async def test_create_and_read_back(self, database):
        repo = SQLHistoryRepository(database.session_factory)
        record = ResponseHistoryRecord(
            user_id="user-1",
            original_message="Where is the invoice?",
            context={"urgency": "standard", "userName": "Alex"},
            variants=[
                AccumulatedVariant(1, "second", "casual", "brief", 0.7, "r", True),
                AccumulatedVariant(0, "first", "professional", "standard", 0.9, "r", True),
            ],
            model="gpt-4",
        )

        history_id = await repo.create(record)
        stored = await repo.get_by_id(history_id)

        assert isinstance(stored, ResponseHistoryRecord)
        assert stored.model == "gpt-4"
        assert stored.mean_confidence == pytest.approx(0.8)
        assert [v.text for v in stored.variants] == ["first", "second"]
        assert [v.variant_index for v in stored.variants] == [0, 1]
        assert stored.context["userName"] == "Alex"

    @pytest.mark.asyncio
    async def test_unknown_id_reads_as_none(self, database):
        repo = SQLHistoryRepository(database.session_factory)
        assert await repo.get_by_id("00000000-0000-0000-0000-000000000000") is None
