"""
API v1 Package
Version 1 of the Reply Stream API endpoints.
"""

from fastapi import APIRouter

from reply_stream.config.constants import API_PREFIX
from .response_routes import router as response_router
from .health_routes import router as health_router

router = APIRouter(prefix=API_PREFIX, tags=["v1"])
router.include_router(response_router)

__all__ = ["router", "response_router", "health_router"]
