"""Health check endpoints."""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.cache import cache_manager
from ..core.config import settings
from ..core.database import health_check_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """Database and cache status; 503 when the database is unreachable."""
    db_healthy = await health_check_db()
    if not settings.cache_enabled:
        cache_status = "disabled"
    else:
        cache_status = "healthy" if await cache_manager.ping() else "unhealthy"

    status = "healthy" if db_healthy and cache_status != "unhealthy" else "degraded"
    if not db_healthy:
        status = "unhealthy"
        logger.error("Health check: database unreachable")

    return JSONResponse(
        status_code=200 if db_healthy else 503,
        content={
            "status": status,
            "service": "SIXKUL API",
            "version": settings.app_version,
            "components": {
                "database": "healthy" if db_healthy else "unhealthy",
                "cache": cache_status,
            },
        },
    )
