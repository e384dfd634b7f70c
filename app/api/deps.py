"""API Dependencies"""

from fastapi import HTTPException, Request, status

from app.services.dashboard_service import DashboardStore


def get_dashboard_store(request: Request) -> DashboardStore:
    """
    Get the dashboard store created by the application lifespan.

    Raises:
        HTTPException: If the application has not finished starting up
    """
    store = getattr(request.app.state, "dashboard_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dashboard not initialized",
        )
    return store
