"""
Dashboard router - overview counts and sidebar badges.

All endpoints require API key authentication.
"""
from fastapi import APIRouter, Depends

from schemas import DashboardOverview, SidebarCounts
from services import DashboardService
from core.auth import verify_api_key
from core.dependencies import get_dashboard_service

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("/overview", response_model=DashboardOverview, summary="Dashboard overview counts")
async def overview(dashboard_service: DashboardService = Depends(get_dashboard_service)):
    return dashboard_service.overview()


@router.get("/sidebar", response_model=SidebarCounts, summary="Sidebar badge counts")
async def sidebar(dashboard_service: DashboardService = Depends(get_dashboard_service)):
    return dashboard_service.sidebar_counts()
