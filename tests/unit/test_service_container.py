"""Unit tests for container lifecycle."""

import asyncio

import pytest


class TestShutdown:

    @pytest.mark.asyncio
    async def test_closes_resources_in_reverse_order(self, container, fake_llm):
        closed = []

        async def close_first():
            closed.append("first")

        async def close_second():
            closed.append("second")

        container.add_closer(close_first)
        container.add_closer(close_second)
        await container.shutdown()

        assert fake_llm.closed
        assert closed == ["second", "first"]

    @pytest.mark.asyncio
    async def test_waits_for_settlement_of_departed_client(
            self, container, fake_llm, quota_repo, history_repo, generation_request
    ):
        entered = asyncio.Event()
        release = asyncio.Event()
        increment = quota_repo.increment_usage

        async def gated_increment(user_id):
            entered.set()
            await release.wait()
            return await increment(user_id)

        quota_repo.increment_usage = gated_increment
        service = container.response_stream_service
        quota = await quota_repo.get("user-1")

        async def consume():
            return [event async for event in service.stream("user-1", generation_request, quota)]

        consumer = asyncio.create_task(consume())
        await entered.wait()
        consumer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await consumer

        shutdown = asyncio.create_task(container.shutdown())
        await asyncio.sleep(0)
        assert not shutdown.done()
        assert not fake_llm.closed

        release.set()
        await shutdown

        assert len(history_repo.records) == 1
        assert quota_repo.records["user-1"].usage_count == 6
        assert fake_llm.closed
