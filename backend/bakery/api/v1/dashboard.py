"""Dashboard endpoint."""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from bakery.api.deps import CurrentUser, OrderServiceDep
from bakery.services.orders.dashboard import DashboardData

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardData, summary="Delivery and sales figures")
async def get_dashboard(
    current_user: CurrentUser,
    service: OrderServiceDep,
    month: Annotated[Optional[int], Query(ge=1, le=12)] = None,
    year: Annotated[Optional[int], Query(ge=1900, le=9999)] = None,
) -> DashboardData:
    """
    Figures for a month, the current month by default.

    The current month is excluded from the sales grid because it is not
    complete yet.
    """
    today = service.clock()
    return await service.get_dashboard_data(month or today.month, year or today.year)
