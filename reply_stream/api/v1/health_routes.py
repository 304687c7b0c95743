"""
Health Check API Routes
Service health, information and Prometheus metrics.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from reply_stream.config.constants import API_VERSION, SERVICE_NAME, SERVICE_VERSION
from reply_stream.dependencies import get_container, get_metrics
from reply_stream.services.service_container import ServiceContainer
from reply_stream.utils.metrics import MetricsCollector

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: ServiceContainer = Depends(get_container)):
    """Liveness plus the status of each registered dependency."""
    dependencies = await container.health_status()
    healthy = all(dep.get("status") == "healthy" for dep in dependencies.values())

    return {
        "status": "healthy" if healthy else "degraded",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dependencies": dependencies,
    }


@router.get("/info")
async def service_info(request: Request):
    settings = request.app.state.settings

    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "api_version": API_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "debug": settings.DEBUG,
        "model": settings.OPENAI_MODEL,
        "variant_count": settings.VARIANT_COUNT,
        "rate_limit_backend": settings.RATE_LIMIT_BACKEND.value,
        "docs_url": request.app.docs_url,
    }


@router.get("/metrics")
async def metrics(collector: MetricsCollector = Depends(get_metrics)):
    return Response(content=collector.export(), media_type=collector.content_type)
