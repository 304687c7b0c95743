"""
Response Generation API Routes
Streaming endpoint that drafts several reply variants over one SSE connection.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
import structlog

from reply_stream.api.middleware.auth_middleware import AuthContext, get_auth_context
from reply_stream.api.middleware.rate_limit_middleware import check_strict_rate_limit
from reply_stream.api.responses.sse import sse_body
from reply_stream.config.constants import SSE_HEADERS, SSE_MEDIA_TYPE, STREAM_ROUTE
from reply_stream.dependencies import get_quota_service, get_response_stream_service
from reply_stream.models.schemas import GenerationRequest
from reply_stream.repositories.rate_limit_repository import RateLimitResult
from reply_stream.services.quota_service import QuotaService
from reply_stream.services.response_stream_service import ResponseStreamService

logger = structlog.get_logger()
router = APIRouter(tags=["responses"])


@router.post(
    STREAM_ROUTE,
    status_code=status.HTTP_200_OK,
    summary="Stream reply variants",
    responses={
        200: {"content": {SSE_MEDIA_TYPE: {}}, "description": "Stream of generation events"},
        400: {"description": "Invalid request body"},
        401: {"description": "Missing or invalid bearer token"},
        403: {"description": "Monthly usage limit exceeded"},
        404: {"description": "No subscription for user"},
        429: {"description": "Rate limit exceeded"},
    }
)
async def stream_responses(
        request: Request,
        body: GenerationRequest,
        rate_limit_result: RateLimitResult = Depends(check_strict_rate_limit),
        auth_context: AuthContext = Depends(get_auth_context),
        quota_service: QuotaService = Depends(get_quota_service),
        stream_service: ResponseStreamService = Depends(get_response_stream_service)
) -> StreamingResponse:
    """
    Generate reply variants for a client message

    Admission failures (rate limit, auth, validation, quota) are returned as
    ordinary JSON errors. Once the stream opens, every outcome is an event
    and the last event is either ``done`` or ``error``.
    """
    quota = await quota_service.reserve(auth_context.user_id)

    logger.info(
        "Opening generation stream",
        user_id=auth_context.user_id,
        tier=quota.tier,
        usage_count=quota.usage_count,
        monthly_limit=quota.monthly_limit,
        refinement=body.is_refinement,
        rate_limit_remaining=rate_limit_result.remaining
    )

    headers = {**SSE_HEADERS, **getattr(request.state, "rate_limit_headers", {})}
    events = stream_service.stream(auth_context.user_id, body, quota)

    return StreamingResponse(
        sse_body(events),
        media_type=SSE_MEDIA_TYPE,
        headers=headers
    )
