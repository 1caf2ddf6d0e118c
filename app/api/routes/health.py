"""
GET /health — server version and fleet counts.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.deps import get_registry
from app.config import VERSION
from app.devices.registry import DeviceRegistry

router = APIRouter()


class FleetCounts(BaseModel):
    total: int
    online: int


class HealthResponse(BaseModel):
    status: str
    version: str
    esps: FleetCounts


@router.get("/health", response_model=HealthResponse)
def get_health(registry: DeviceRegistry = Depends(get_registry)) -> HealthResponse:
    """
    Returns the server status and how many devices are known / online.

    - **status**: always ``"ok"`` while the server is answering.
    - **esps.online**: devices contacted within the configured timeout.
    """
    summary = registry.health_summary()
    return HealthResponse(
        status="ok",
        version=VERSION,
        esps=FleetCounts(total=summary.total, online=summary.online),
    )
