"""Health check endpoint."""

from fastapi import APIRouter, Depends

from atlas_gateway.config import Settings, get_settings
from atlas_gateway.models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Liveness probe; never calls an upstream."""
    return HealthResponse(status="healthy", version=settings.app_version)
