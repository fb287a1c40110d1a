from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "healthy"
    service: str = "aidesk-api"
    version: str = "0.1.0"
    timestamp: str
    storage: str = "durable"
    registered_users: int = 0

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "service": "aidesk-api",
                "version": "0.1.0",
                "timestamp": "2026-01-01T12:00:00",
                "storage": "durable",
                "registered_users": 1
            }
        }
