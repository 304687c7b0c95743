"""
Configuration package for Reply Stream Service.

This package provides centralized configuration management with
environment-based settings, validation, and constants.
"""

from reply_stream.config.settings import get_settings, Settings
from reply_stream.config.constants import (
    SERVICE_NAME,
    API_VERSION,
    API_PREFIX,
    RATE_LIMIT_PRESETS,
    RateLimitPreset,
)

__all__ = [
    "get_settings",
    "Settings",
    "SERVICE_NAME",
    "API_VERSION",
    "API_PREFIX",
    "RATE_LIMIT_PRESETS",
    "RateLimitPreset",
]
