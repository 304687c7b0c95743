"""
Application constants and enumerations.

This module defines the constant values and configuration defaults used
throughout the Reply Stream Service.
"""

from enum import Enum
from typing import Dict, List, Tuple

# Service Information
SERVICE_NAME = "reply-stream-service"
API_VERSION = "v1"
SERVICE_VERSION = "1.0.0"
SERVICE_DESCRIPTION = "Streamed AI response drafting for freelancer client messages"

# API Configuration
API_PREFIX = f"/api/{API_VERSION}"
STREAM_ROUTE = "/responses/stream"


class RateLimitPreset(str, Enum):
    """Named sliding-window presets."""
    STRICT = "strict"
    STANDARD = "standard"
    RELAXED = "relaxed"


# Rate Limiting Configuration (window in milliseconds)
RATE_LIMIT_PRESETS: Dict[RateLimitPreset, Dict[str, int]] = {
    # AI and other expensive endpoints
    RateLimitPreset.STRICT: {"window_ms": 60 * 1000, "max_requests": 10},
    # Authenticated endpoints
    RateLimitPreset.STANDARD: {"window_ms": 60 * 1000, "max_requests": 100},
    # Public endpoints
    RateLimitPreset.RELAXED: {"window_ms": 60 * 1000, "max_requests": 300},
}

# Server-Sent Events
SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# Subscription tiers
PREMIUM_TIER = "premium"

# Generation request limits
ORIGINAL_MESSAGE_MIN_LENGTH = 10
ORIGINAL_MESSAGE_MAX_LENGTH = 2000

# Variant styles as (tone, length), in variant index order
VARIANT_STYLES: List[Tuple[str, str]] = [
    ("professional", "standard"),
    ("casual", "brief"),
    ("formal", "detailed"),
]

# Metadata heuristic
BASE_CONFIDENCE = 0.7
MAX_CONFIDENCE = 0.95
PLACEHOLDER_CONFIDENCE = 0.8

# Prompt sanitization
SANITIZED_INPUT_MAX_LENGTH = 5000
PROMPT_INJECTION_PATTERNS: List[str] = [
    r"ignore\s+(previous|above|all|prior)\s+instructions?",
    r"disregard\s+(previous|above|all|prior)\s+instructions?",
    r"forget\s+(previous|above|all|prior)\s+instructions?",
    r"new\s+instructions?:",
    r"system\s*:",
    r"assistant\s*:",
    r"\[SYSTEM\]",
    r"\[INST\]",
    r"<\|im_start\|>",
    r"<\|im_end\|>",
]


class ErrorCategory(str, Enum):
    """Error categories for monitoring and alerting."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    QUOTA = "quota"
    INTERNAL = "internal"
    EXTERNAL = "external"
    TIMEOUT = "timeout"


ERROR_MESSAGES = {
    "RATE_LIMIT_EXCEEDED": "Rate limit exceeded. Please try again later.",
    "QUOTA_EXCEEDED": "Monthly usage limit exceeded",
    "QUOTA_NOT_FOUND": "Subscription not found",
    "UNAUTHORIZED": "Invalid or expired token",
    "MISSING_TOKEN": "Unauthorized - No token provided",
    "GENERATION_FAILED": "An error occurred during streaming",
    "PERSISTENCE_FAILED": "Failed to save response history",
}
