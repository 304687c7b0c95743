"""Unit tests for Settings."""

import pytest
from pydantic import ValidationError

from reply_stream.config.settings import Environment, RateLimitBackend, Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings(ENVIRONMENT="testing")

        assert settings.VARIANT_COUNT == 3
        assert settings.OPENAI_MAX_TOKENS == 500
        assert settings.RATE_LIMIT_BACKEND == RateLimitBackend.MEMORY
        assert settings.is_testing()

    def test_zero_stall_timeout_disables_watchdog(self):
        assert Settings(VARIANT_STALL_TIMEOUT_SECONDS=0).stall_timeout is None
        assert Settings(VARIANT_STALL_TIMEOUT_SECONDS=30).stall_timeout == 30

    def test_database_url_needs_async_driver(self):
        with pytest.raises(ValidationError):
            Settings(DATABASE_URL="postgresql://localhost/db")

    def test_production_rejects_unsafe_defaults(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="production")

    def test_production_accepts_complete_configuration(self):
        settings = Settings(
            ENVIRONMENT="production",
            ALLOWED_ORIGINS=["https://app.example.com"],
            OPENAI_API_KEY="sk-test",
            JWT_SECRET_KEY="a-real-secret-value-for-prod",
            RATE_LIMIT_BACKEND="redis",
        )
        assert settings.ENVIRONMENT == Environment.PRODUCTION
        assert settings.is_production()
