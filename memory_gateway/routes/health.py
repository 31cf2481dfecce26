"""
Health check endpoint.

Used by:
  - Render / container health checks
  - Front-end to check API connectivity and which providers are usable

The service is healthy (HTTP 200) even with no provider keys set — each
missing key only disables its own branch.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from memory_gateway.core.config import Settings, get_settings

VERSION = "0.1.0"

router = APIRouter()


class HealthResponse(BaseModel):
    status: str  # Always "ok" if the process is alive
    version: str
    environment: str
    providers: dict[str, bool]


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=VERSION,
        environment=settings.environment,
        providers=settings.provider_status(),
    )
