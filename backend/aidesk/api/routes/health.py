from fastapi import APIRouter, Depends
from datetime import datetime

from aidesk.api.schemas import HealthResponse
from aidesk.core.config import settings
from aidesk.services.auth_service import AuthenticationService, get_auth_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=HealthResponse)
async def health_check(auth_service: AuthenticationService = Depends(get_auth_service)):
    """Health check endpoint"""
    store = auth_service.store
    if store is None:
        return HealthResponse(
            status="unhealthy",
            version=settings.VERSION,
            timestamp=datetime.now().isoformat(),
            storage="unavailable"
        )

    try:
        registered_users = await store.count_users()
        health_status = "healthy" if store.is_durable else "degraded"
    except Exception:
        registered_users = 0
        health_status = "unhealthy"

    return HealthResponse(
        status=health_status,
        version=settings.VERSION,
        timestamp=datetime.now().isoformat(),
        storage=store.mode.value,
        registered_users=registered_users
    )


@router.get("/version", response_model=dict)
async def get_version():
    """Get API version information"""
    return {
        "service": "aidesk-api",
        "version": settings.VERSION,
        "app_name": settings.APP_NAME,
        "debug": settings.DEBUG
    }
