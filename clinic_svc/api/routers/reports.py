"""
Reports router - whistleblower report endpoints.

All endpoints require API key authentication.

Architecture:
    HTTP Request → Router (this file) → ReportService → ReportRepository → Database
"""
import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response

from schemas import ReportCreate, ReportResponse, ReportListResponse
from services import ReportService
from core.auth import verify_api_key
from core.dependencies import get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/reports",
    tags=["Reports"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("", response_model=ReportListResponse, summary="Search reports")
async def list_reports(
    search: str = Query("", description="Search term; blank returns every report"),
    field: Literal["all", "clientName", "facilityName", "reportType", "createdAt", "description"] = Query("all"),
    report_service: ReportService = Depends(get_report_service)
):
    """
    Reports newest first with the anonymous count and latest report
    computed over the matching reports.
    """
    return report_service.list_reports(search=search, field=field)


@router.post("", response_model=ReportResponse, status_code=201, summary="Submit a report")
async def create_report(report: ReportCreate, report_service: ReportService = Depends(get_report_service)):
    return report_service.create_report(report)


@router.get("/{report_id}", response_model=ReportResponse, summary="Get a report")
async def get_report(report_id: str, report_service: ReportService = Depends(get_report_service)):
    return report_service.get_report(report_id)


@router.delete("/{report_id}", status_code=204, summary="Delete a report")
async def delete_report(report_id: str, report_service: ReportService = Depends(get_report_service)):
    report_service.delete_report(report_id)
    return Response(status_code=204)
