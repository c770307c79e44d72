from __future__ import annotations

from fastapi import APIRouter

from app.api.schemas.meta import HealthResponse
from app.core.config import settings

router = APIRouter()


@router.get(
    "/health",
    tags=["meta"],
    summary="Health check",
    response_model=HealthResponse,
)
def health() -> HealthResponse:
    """Report that the API process is serving requests."""
    return HealthResponse(
        status="ok", app_name=settings.app_name, environment=settings.environment
    )
