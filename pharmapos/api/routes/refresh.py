"""
Refresh signal endpoints.

Clients poll the generation counters and reload a view when its domain's
counter moves.
"""

from fastapi import APIRouter, Depends

from pharmapos.api.dependencies import get_bus
from pharmapos.application.dto.responses import RefreshResponse
from pharmapos.core.services import RefreshBus, RefreshDomain

router = APIRouter(prefix="/api/refresh", tags=["refresh"])


@router.get("", response_model=RefreshResponse)
async def get_generations(bus: RefreshBus = Depends(get_bus)) -> RefreshResponse:
    """Current generation per data domain."""
    return RefreshResponse(generations=bus.generations())


@router.post("", response_model=RefreshResponse)
async def trigger_refresh(
    domains: list[RefreshDomain] | None = None,
    bus: RefreshBus = Depends(get_bus),
) -> RefreshResponse:
    """Signal that data changed. No domains means all of them."""
    return RefreshResponse(generations=bus.trigger_refresh(domains or [RefreshDomain.ALL]))
