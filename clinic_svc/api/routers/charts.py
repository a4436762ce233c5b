"""
Charts router - dashboard chart CRUD and Plotly figures.

All endpoints require API key authentication.

Architecture:
    HTTP Request → Router (this file) → ChartService → ChartRepository → Database
                                                     → ChartFigureBuilder (Plotly)
"""
import logging
from typing import List, Literal

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import HTMLResponse

from schemas import ChartCreate, ChartUpdate, ChartResponse, ChartStats
from services.charts import ChartService
from core.auth import verify_api_key
from core.dependencies import get_chart_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/charts",
    tags=["Charts"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("", response_model=List[ChartResponse], summary="List charts")
async def list_charts(
    category: str = Query("all", description="Chart category, or 'all'"),
    chart_service: ChartService = Depends(get_chart_service)
):
    """Charts most recently updated first, with defaults applied."""
    return chart_service.list_charts(category)


@router.get("/categories", response_model=List[str], summary="Distinct chart categories")
async def chart_categories(chart_service: ChartService = Depends(get_chart_service)):
    return chart_service.categories()


@router.get("/stats", response_model=ChartStats, summary="Chart statistics")
async def chart_stats(chart_service: ChartService = Depends(get_chart_service)):
    return chart_service.stats()


@router.post("", response_model=ChartResponse, status_code=201, summary="Create a chart")
async def create_chart(chart: ChartCreate, chart_service: ChartService = Depends(get_chart_service)):
    return chart_service.create_chart(chart)


@router.get("/{chart_id}", response_model=ChartResponse, summary="Get a chart")
async def get_chart(chart_id: str, chart_service: ChartService = Depends(get_chart_service)):
    return chart_service.get_chart(chart_id)


@router.patch("/{chart_id}", response_model=ChartResponse, summary="Update a chart")
async def update_chart(
    chart_id: str,
    update: ChartUpdate,
    chart_service: ChartService = Depends(get_chart_service)
):
    return chart_service.update_chart(chart_id, update)


@router.delete("/{chart_id}", status_code=204, summary="Delete a chart")
async def delete_chart(chart_id: str, chart_service: ChartService = Depends(get_chart_service)):
    chart_service.delete_chart(chart_id)
    return Response(status_code=204)


@router.get(
    "/{chart_id}/figure",
    summary="Render a chart",
    description="Plotly figure as JSON (for plotly.js) or as a standalone HTML page.",
    responses={200: {"content": {"application/json": {}, "text/html": {}}}}
)
async def chart_figure(
    chart_id: str,
    output: Literal["json", "html"] = Query("json"),
    chart_service: ChartService = Depends(get_chart_service)
):
    if output == "html":
        return HTMLResponse(content=chart_service.figure_html(chart_id))
    return Response(content=chart_service.figure_json(chart_id), media_type="application/json")
