from typing import Any
from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api import deps
from app.config import settings
from app.core.limiter import limiter
from app.models.enums import DashboardPhase
from app.schemas.responses import SuccessResponse
from app.schemas.statistics import DashboardState, StatisticsSnapshot
from app.services.dashboard_service import DashboardStore, NO_DATA_MESSAGE

router = APIRouter()


@router.get("/state", response_model=SuccessResponse[DashboardState])
async def get_dashboard_state(
    store: DashboardStore = Depends(deps.get_dashboard_store),
) -> Any:
    """
    Current dashboard phase and, when ready, its snapshot.
    """
    return SuccessResponse(data=store.state)


@router.get("/stats", response_model=SuccessResponse[StatisticsSnapshot])
async def get_dashboard_stats(
    store: DashboardStore = Depends(deps.get_dashboard_store),
) -> Any:
    """
    Aggregated course statistics. Loads them on first access.
    """
    state = store.state
    if state.phase == DashboardPhase.UNINITIALIZED:
        state = await store.refresh()

    if state.phase != DashboardPhase.READY or state.snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=NO_DATA_MESSAGE,
        )
    return SuccessResponse(data=state.snapshot)


@router.post("/refresh", response_model=SuccessResponse[DashboardState])
@limiter.limit(settings.rate_limit)
async def refresh_dashboard(
    request: Request,
    store: DashboardStore = Depends(deps.get_dashboard_store),
) -> Any:
    """
    Re-read all collections and replace the snapshot.
    A failed refresh is reported in the returned state, not as an error status.
    """
    state = await store.refresh()
    message = "Dashboard refreshed" if state.phase == DashboardPhase.READY else NO_DATA_MESSAGE
    return SuccessResponse(data=state, message=message)
