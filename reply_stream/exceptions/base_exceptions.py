"""
Base exception classes and error handling for Reply Stream Service.

Rejection errors (rate limit, auth, validation, quota) are raised before a
stream is opened and surface as ordinary HTTP error responses through the
handlers registered here. Errors that occur after the stream has opened
never reach these handlers; they become the stream's terminal error event.
"""

import traceback
import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from reply_stream.config.constants import ERROR_MESSAGES, ErrorCategory
from reply_stream.utils.logger import get_logger

logger = get_logger(__name__)

_STATUS_CATEGORIES = {
    400: ErrorCategory.VALIDATION,
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.AUTHORIZATION,
    404: ErrorCategory.NOT_FOUND,
    405: ErrorCategory.VALIDATION,
    429: ErrorCategory.RATE_LIMIT,
    502: ErrorCategory.EXTERNAL,
    504: ErrorCategory.TIMEOUT,
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReplyStreamException(Exception):
    """
    Root of the service's HTTP-facing errors.

    ``message`` is what gets logged; ``user_message`` is what the client
    sees. ``headers`` are copied onto the error response.
    """

    def __init__(
            self,
            message: str,
            error_code: str = "INTERNAL_ERROR",
            status_code: int = 500,
            details: Optional[Dict[str, Any]] = None,
            category: ErrorCategory = ErrorCategory.INTERNAL,
            user_message: Optional[str] = None,
            user_id: Optional[str] = None,
            retryable: bool = False,
            caused_by: Optional[Exception] = None,
            headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.category = category
        self.user_message = user_message or message
        self.user_id = user_id
        self.retryable = retryable
        self.caused_by = caused_by
        self.headers = headers or {}
        self.timestamp = _utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """The ``error`` part of the response envelope."""
        error = {
            "code": self.error_code,
            "message": self.user_message,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "retryable": self.retryable,
        }
        if self.details:
            error["details"] = self.details
        return {"error": error}

    def log_error(self, log: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        """Log at error for 5xx, warning for 4xx, info otherwise."""
        log = log or logger

        context: Dict[str, Any] = {
            "error_code": self.error_code,
            "error_category": self.category.value,
            "status_code": self.status_code,
            "retryable": self.retryable,
        }
        if self.user_id:
            context["user_id"] = self.user_id
        if self.details:
            context["details"] = self.details
        if self.caused_by:
            context["caused_by"] = str(self.caused_by)
            context["caused_by_type"] = type(self.caused_by).__name__

        if self.status_code >= 500:
            log.error(self.message, **context)
        elif self.status_code >= 400:
            log.warning(self.message, **context)
        else:
            log.info(self.message, **context)


class AuthenticationError(ReplyStreamException):
    """Missing, malformed, expired or otherwise rejected bearer token."""

    def __init__(
            self,
            message: str = "Authentication failed",
            **kwargs
    ):
        kwargs.setdefault("user_message", ERROR_MESSAGES["UNAUTHORIZED"])
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_FAILED",
            status_code=401,
            category=ErrorCategory.AUTHENTICATION,
            headers={"WWW-Authenticate": "Bearer"},
            **kwargs
        )


class QuotaExceededError(ReplyStreamException):
    """Exception raised when a user's monthly usage is exhausted."""

    def __init__(
            self,
            message: str = "Monthly usage limit exceeded",
            usage_count: Optional[int] = None,
            monthly_limit: Optional[int] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if usage_count is not None:
            details["usage_count"] = usage_count
        if monthly_limit is not None:
            details["monthly_limit"] = monthly_limit

        super().__init__(
            message=message,
            error_code="QUOTA_EXCEEDED",
            status_code=403,
            category=ErrorCategory.QUOTA,
            details=details,
            user_message=ERROR_MESSAGES["QUOTA_EXCEEDED"],
            **kwargs
        )


class QuotaNotFoundError(ReplyStreamException):
    """Exception raised when a user has no subscription record."""

    def __init__(
            self,
            message: str = "Subscription not found",
            **kwargs
    ):
        super().__init__(
            message=message,
            error_code="QUOTA_NOT_FOUND",
            status_code=404,
            category=ErrorCategory.NOT_FOUND,
            user_message=ERROR_MESSAGES["QUOTA_NOT_FOUND"],
            **kwargs
        )


class RateLimitExceededError(ReplyStreamException):
    """A sliding window is full for this route and client address."""

    def __init__(
            self,
            limit: int,
            remaining: int,
            reset_at_ms: int,
            retry_after: int,
            message: str = "Rate limit exceeded",
            **kwargs
    ):
        self.limit = limit
        self.remaining = remaining
        self.reset_at_ms = reset_at_ms
        self.retry_after = retry_after

        reset_at = datetime.fromtimestamp(reset_at_ms / 1000, tz=timezone.utc)
        super().__init__(
            message=message,
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            category=ErrorCategory.RATE_LIMIT,
            details={"limit": limit, "retry_after": retry_after},
            user_message=ERROR_MESSAGES["RATE_LIMIT_EXCEEDED"],
            retryable=True,
            headers={
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": str(remaining),
                "X-RateLimit-Reset": reset_at.isoformat(),
                "Retry-After": str(retry_after),
            },
            **kwargs
        )


class ExternalServiceError(ReplyStreamException):
    """Exception for failures of the language model or identity provider."""

    def __init__(
            self,
            message: str = "External service error",
            service_name: Optional[str] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if service_name:
            details["service_name"] = service_name

        super().__init__(
            message=message,
            error_code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            category=ErrorCategory.EXTERNAL,
            details=details,
            user_message="A required service is currently unavailable. Please try again later.",
            retryable=True,
            **kwargs
        )


class InternalServerError(ReplyStreamException):

    def __init__(
            self,
            message: str = "Internal server error",
            **kwargs
    ):
        super().__init__(
            message=message,
            error_code="INTERNAL_SERVER_ERROR",
            status_code=500,
            category=ErrorCategory.INTERNAL,
            user_message="An unexpected error occurred. Please try again later.",
            retryable=True,
            **kwargs
        )


def _envelope(request: Request, error: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap an ``error`` body with status and request metadata."""
    meta = {
        "timestamp": _utc_now().isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        meta["request_id"] = request_id

    return {"status": "error", "error": error, "meta": meta}


async def reply_stream_exception_handler(
        request: Request,
        exc: ReplyStreamException
) -> JSONResponse:
    exc.log_error()
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, exc.to_dict()["error"]),
        headers=exc.headers or None
    )


async def rate_limit_exception_handler(
        request: Request,
        exc: RateLimitExceededError
) -> JSONResponse:
    """
    Handler for sliding-window rejections.

    The body shape is consumed directly by browser and extension clients.
    """
    exc.log_error()

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "Too Many Requests",
            "message": exc.user_message,
            "retryAfter": exc.retry_after,
        },
        headers=exc.headers
    )


async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
) -> JSONResponse:
    """Framework HTTP errors, including 404 for unknown paths and 405 for wrong methods."""
    category = _STATUS_CATEGORIES.get(exc.status_code, ErrorCategory.INTERNAL)

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, {
            "code": f"HTTP_{exc.status_code}",
            "message": exc.detail,
            "category": category.value,
            "timestamp": _utc_now().isoformat(),
        }),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
) -> JSONResponse:
    """
    Request body failed schema validation.

    Always 400 (FastAPI's default is 422), with one entry per invalid field.
    """
    validation_errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        validation_errors=validation_errors,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=400,
        content=_envelope(request, {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request",
            "category": ErrorCategory.VALIDATION.value,
            "timestamp": _utc_now().isoformat(),
            "details": {"validation_errors": validation_errors},
        })
    )


async def generic_exception_handler(
        request: Request,
        exc: Exception
) -> JSONResponse:
    error_id = str(uuid.uuid4())

    logger.error(
        "Unexpected exception occurred",
        error_id=error_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        traceback=traceback.format_exc()
    )

    return JSONResponse(
        status_code=500,
        content=_envelope(request, {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred",
            "category": ErrorCategory.INTERNAL.value,
            "timestamp": _utc_now().isoformat(),
            "error_id": error_id,
        })
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers, most specific exception first."""
    app.add_exception_handler(RateLimitExceededError, rate_limit_exception_handler)
    app.add_exception_handler(ReplyStreamException, reply_stream_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)


__all__ = [
    "ReplyStreamException",
    "AuthenticationError",
    "QuotaExceededError",
    "QuotaNotFoundError",
    "RateLimitExceededError",
    "ExternalServiceError",
    "InternalServerError",
    "setup_exception_handlers",
]
