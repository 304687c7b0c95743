"""
Service Container

Holds the collaborators of one application instance and wires the services
on top of them. The app factory builds one from settings; tests build one
from fakes.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from reply_stream.core.auth.token_verifier import TokenVerifier
from reply_stream.core.llm.base_client import LanguageModelClient
from reply_stream.core.prompts import PromptBuilder
from reply_stream.repositories.history_repository import HistoryRepository
from reply_stream.repositories.quota_repository import QuotaRepository
from reply_stream.repositories.rate_limit_repository import RateLimitStore
from reply_stream.repositories.user_profile_repository import UserProfileRepository
from reply_stream.services.quota_service import QuotaService
from reply_stream.services.rate_limit_service import RateLimiterService
from reply_stream.services.response_stream_service import ResponseStreamService
from reply_stream.services.settlement_service import SettlementService
from reply_stream.services.stream_multiplexer import StreamMultiplexer
from reply_stream.services.variant_generator import VariantGenerator
from reply_stream.utils.metrics import MetricsCollector

logger = structlog.get_logger(__name__)

HealthCheck = Callable[[], Awaitable[Dict[str, Any]]]
Closer = Callable[[], Awaitable[None]]


class ServiceContainer:
    """
    Dependency container for the reply streaming service

    Owns the external collaborators (token verifier, model client, stores)
    and the services composed from them.
    """

    def __init__(
            self,
            token_verifier: TokenVerifier,
            llm_client: LanguageModelClient,
            quota_repository: QuotaRepository,
            history_repository: HistoryRepository,
            profile_repository: UserProfileRepository,
            rate_limit_store: RateLimitStore,
            metrics: Optional[MetricsCollector] = None,
            rate_limit_enabled: bool = True,
            variant_count: int = 3,
            base_temperature: float = 0.7,
            temperature_step: float = 0.05,
            max_tokens: int = 500,
            stall_timeout: Optional[float] = None
    ):
        self.token_verifier = token_verifier
        self.llm_client = llm_client
        self.quota_repository = quota_repository
        self.history_repository = history_repository
        self.profile_repository = profile_repository
        self.rate_limit_store = rate_limit_store
        self.metrics = metrics or MetricsCollector()

        self.rate_limiter = RateLimiterService(
            rate_limit_store, enabled=rate_limit_enabled, metrics=self.metrics
        )
        self.quota_service = QuotaService(quota_repository, metrics=self.metrics)
        self.variant_generator = VariantGenerator(
            llm_client,
            prompt_builder=PromptBuilder(),
            variant_count=variant_count,
            base_temperature=base_temperature,
            temperature_step=temperature_step,
            max_tokens=max_tokens,
        )
        self.settlement_service = SettlementService(history_repository, self.quota_service)
        self.response_stream_service = ResponseStreamService(
            generator=self.variant_generator,
            multiplexer=StreamMultiplexer(stall_timeout=stall_timeout),
            settlement=self.settlement_service,
            profile_repository=profile_repository,
            metrics=self.metrics,
        )

        self._health_checks: Dict[str, HealthCheck] = {}
        self._closers: List[Closer] = []

    def add_health_check(self, name: str, check: HealthCheck) -> None:
        self._health_checks[name] = check

    def add_closer(self, closer: Closer) -> None:
        self._closers.append(closer)

    async def health_status(self) -> Dict[str, Dict[str, Any]]:
        """Run registered dependency checks."""
        status = {}
        for name, check in self._health_checks.items():
            status[name] = await check()
        return status

    async def shutdown(self) -> None:
        """Finish in-flight settlements, then close owned resources in reverse order of registration."""
        await self.response_stream_service.drain()
        await self.llm_client.close()
        for closer in reversed(self._closers):
            try:
                await closer()
            except Exception as e:
                logger.error("Error closing resource", error=str(e))
        self._closers.clear()
