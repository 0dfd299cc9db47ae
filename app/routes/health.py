"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends
from app.core.settings import settings
from app.services.lifecycle_engine import LifecycleEngine
from app.utils.security import get_engine
from datetime import datetime, timezone


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/engine")
async def engine_health(engine: LifecycleEngine = Depends(get_engine)):
    """
    Lifecycle engine check: confirms the in-memory engine is up and reports
    collection sizes.
    """
    stats = engine.stats()
    return {
        "status": "healthy",
        "advisory_enabled": settings.AI_ENABLED,
        **stats,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
