from .common import HealthResponse

__all__ = [
    "HealthResponse"
]
