from fastapi import APIRouter

from aidesk.api.routes import health_router, auth_router
from aidesk.core.config import settings

# Create main API router
api_router = APIRouter(prefix=settings.API_V1_STR)

# Include all route modules
api_router.include_router(health_router)
api_router.include_router(auth_router)
