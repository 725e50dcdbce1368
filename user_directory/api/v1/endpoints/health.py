"""
Health checks - for load balancers and monitoring.
Readiness also reports which user store was selected at startup.
"""

from fastapi import APIRouter

from user_directory.config import get_settings
from user_directory.core.dependencies import Directory

router = APIRouter()
settings = get_settings()


@router.get("")
async def health():
    """Liveness: is the process up?"""
    return {"status": "ok", "app": settings.app_name}


@router.get("/ready")
async def ready(service: Directory):
    """Readiness: store selected and serving."""
    return {"status": "ready", "store": service.store_kind}
