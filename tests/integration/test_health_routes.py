"""HTTP-level tests for the operational endpoints."""

import pytest

from tests.conftest import AUTH_HEADERS, VALID_BODY


class TestHealthRoutes:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "reply-stream-service"

    @pytest.mark.asyncio
    async def test_health_reports_failing_dependency(self, client, container):
        async def broken():
            return {"status": "unhealthy", "error": "connection refused"}

        container.add_health_check("postgres", broken)
        response = await client.get("/health")

        assert response.json()["status"] == "degraded"
        assert response.json()["dependencies"]["postgres"]["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_info(self, client):
        body = (await client.get("/info")).json()

        assert body["environment"] == "testing"
        assert body["variant_count"] == 3
        assert body["api_version"] == "v1"

    @pytest.mark.asyncio
    async def test_metrics_after_stream(self, client):
        await client.post("/api/v1/responses/stream", json=VALID_BODY, headers=AUTH_HEADERS)
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert 'reply_stream_streams_finished_total{outcome="done"} 1.0' in response.text
