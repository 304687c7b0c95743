"""
Dependency wiring

Builds the service container from settings and exposes FastAPI dependency
providers that read it from application state.
"""

from typing import Optional

from fastapi import Request

from reply_stream.config.settings import RateLimitBackend, Settings
from reply_stream.core.auth.token_verifier import JWTTokenVerifier
from reply_stream.core.llm.openai_client import OpenAIStreamingClient
from reply_stream.database.postgresdb import PostgresDatabase
from reply_stream.database.redis_client import RedisManager
from reply_stream.repositories.history_repository import SQLHistoryRepository
from reply_stream.repositories.quota_repository import SQLQuotaRepository
from reply_stream.repositories.rate_limit_repository import (
    InMemoryRateLimitStore, RateLimitStore, RedisRateLimitStore
)
from reply_stream.repositories.user_profile_repository import SQLUserProfileRepository
from reply_stream.services.quota_service import QuotaService
from reply_stream.services.rate_limit_service import RateLimiterService
from reply_stream.services.response_stream_service import ResponseStreamService
from reply_stream.services.service_container import ServiceContainer
from reply_stream.utils.logger import get_logger
from reply_stream.utils.metrics import MetricsCollector

logger = get_logger(__name__)


def build_container(settings: Settings) -> ServiceContainer:
    """
    Create the production collaborators described by settings.

    Connections are opened lazily, so building the container performs no I/O.
    """
    database = PostgresDatabase(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        echo=settings.DATABASE_ECHO,
    )
    session_factory = database.session_factory

    redis_manager: Optional[RedisManager] = None
    rate_limit_store: RateLimitStore
    if settings.RATE_LIMIT_BACKEND == RateLimitBackend.REDIS:
        redis_manager = RedisManager(settings.REDIS_URL)
        rate_limit_store = RedisRateLimitStore(redis_manager.client)
    else:
        rate_limit_store = InMemoryRateLimitStore()

    container = ServiceContainer(
        token_verifier=JWTTokenVerifier(
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            audience=settings.JWT_AUDIENCE,
        ),
        llm_client=OpenAIStreamingClient(
            model=settings.OPENAI_MODEL,
            api_key=settings.OPENAI_API_KEY,
            organization=settings.OPENAI_ORG_ID,
        ),
        quota_repository=SQLQuotaRepository(session_factory),
        history_repository=SQLHistoryRepository(session_factory),
        profile_repository=SQLUserProfileRepository(session_factory),
        rate_limit_store=rate_limit_store,
        metrics=MetricsCollector(enabled=settings.METRICS_ENABLED),
        rate_limit_enabled=settings.RATE_LIMIT_ENABLED,
        variant_count=settings.VARIANT_COUNT,
        base_temperature=settings.OPENAI_BASE_TEMPERATURE,
        temperature_step=settings.OPENAI_TEMPERATURE_STEP,
        max_tokens=settings.OPENAI_MAX_TOKENS,
        stall_timeout=settings.stall_timeout,
    )

    container.add_health_check("postgres", database.health_check)
    container.add_closer(database.close)
    if redis_manager is not None:
        container.add_health_check("redis", redis_manager.health_check)
        container.add_closer(redis_manager.close)

    logger.info(
        "Service container built",
        rate_limit_backend=settings.RATE_LIMIT_BACKEND.value,
        model=settings.OPENAI_MODEL,
        variant_count=settings.VARIANT_COUNT
    )
    return container


# =============================================================================
# FastAPI dependency providers
# =============================================================================

def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_rate_limiter(request: Request) -> RateLimiterService:
    return get_container(request).rate_limiter


def get_quota_service(request: Request) -> QuotaService:
    return get_container(request).quota_service


def get_response_stream_service(request: Request) -> ResponseStreamService:
    return get_container(request).response_stream_service


def get_metrics(request: Request) -> MetricsCollector:
    return get_container(request).metrics
