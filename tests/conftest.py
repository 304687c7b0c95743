"""Shared fixtures: fakes for every external collaborator and an app wired to them."""

import httpx
import pytest
import pytest_asyncio

from reply_stream.config.settings import Settings
from reply_stream.main import create_app
from reply_stream.models.records import QuotaRecord, UserProfile
from reply_stream.models.schemas import GenerationRequest
from reply_stream.repositories.rate_limit_repository import InMemoryRateLimitStore
from reply_stream.services.service_container import ServiceContainer
from reply_stream.utils.metrics import MetricsCollector

from tests.fakes import (
    FakeLanguageModel,
    FakeTokenVerifier,
    InMemoryHistoryRepository,
    InMemoryQuotaRepository,
    InMemoryUserProfileRepository,
)

AUTH_HEADERS = {"Authorization": "Bearer valid-token"}

VALID_BODY = {
    "originalMessage": "Hi, could you send me an update on the landing page?",
    "context": {
        "urgency": "standard",
        "messageType": "update",
        "relationshipStage": "established",
        "projectPhase": "active",
        "clientName": "Sam",
    },
}


@pytest.fixture
def settings():
    return Settings(
        ENVIRONMENT="testing",
        JWT_SECRET_KEY="test-secret-key-with-enough-length",
        OPENAI_MODEL="fake-gpt",
        VARIANT_STALL_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def generation_request():
    return GenerationRequest.model_validate(VALID_BODY)


@pytest.fixture
def fake_llm():
    return FakeLanguageModel()


@pytest.fixture
def quota_repo():
    return InMemoryQuotaRepository([
        QuotaRecord(user_id="user-1", tier="professional", usage_count=5, monthly_limit=100),
    ])


@pytest.fixture
def history_repo():
    return InMemoryHistoryRepository()


@pytest.fixture
def profile_repo():
    return InMemoryUserProfileRepository([
        UserProfile(user_id="user-1", first_name="Alex", style_profile={"tone": "warm"}),
    ])


@pytest.fixture
def token_verifier():
    return FakeTokenVerifier()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def container(fake_llm, quota_repo, history_repo, profile_repo, token_verifier, metrics):
    return ServiceContainer(
        token_verifier=token_verifier,
        llm_client=fake_llm,
        quota_repository=quota_repo,
        history_repository=history_repo,
        profile_repository=profile_repo,
        rate_limit_store=InMemoryRateLimitStore(),
        metrics=metrics,
        stall_timeout=5.0,
    )


@pytest.fixture
def app(container, settings):
    return create_app(container=container, settings=settings)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
