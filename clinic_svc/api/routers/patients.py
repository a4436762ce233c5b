"""
Patients router - ANC record endpoints.

This router handles patient lists, trimester views, detail, registration,
visits and broadcast category resolution. All endpoints require API key
authentication.

Architecture:
    HTTP Request → Router (this file) → PatientService → AncRecordRepository → Database

Safety Features:
    - Default query limits to prevent unbounded responses
    - Warnings logged when limits are applied
"""
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from schemas import (
    PatientCreate,
    BasicInfoUpdate,
    VisitRecord,
    PatientDetailResponse,
    PatientListResponse,
    TrimesterGroup,
    CategoryRecipients,
)
from services import PatientService, PatientFilters
from core.auth import verify_api_key
from core.config import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from core.dependencies import get_patient_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/patients",
    tags=["Patients"],
    dependencies=[Depends(verify_api_key)],  # Require API key for all endpoints
)


# =============================================================================
# LIST AND VIEWS
# =============================================================================

@router.get(
    "",
    response_model=PatientListResponse,
    summary="List patients",
    description=f"Filtered and sorted patient list with stats over the filtered set. "
                f"Default limit is {DEFAULT_QUERY_LIMIT}, maximum is {MAX_QUERY_LIMIT}."
)
async def list_patients(
    search: str = Query("", description="Name or email substring (case-insensitive), or phone substring"),
    trimester: str = Query("", description="Exact trimester label; empty or 'All' for no filter"),
    visit_operator: Literal["lt", "eq", "gte", "gt"] = Query("gte"),
    visit_count: int = Query(0, ge=0, le=8, description="Applied only when greater than 0"),
    risk_level: List[str] = Query([], description="Any of Low, Medium, High"),
    status: List[str] = Query([], description="Any of Active, Delivered"),
    min_age: int = Query(18, ge=0, le=120),
    max_age: int = Query(45, ge=0, le=120),
    due_within_days: Optional[int] = Query(None, ge=1, description="Active patients due within N days"),
    sort_by: Literal["name", "age", "weeks", "visit_count", "last_visit", "due_date"] = Query("name"),
    sort_order: Literal["asc", "desc"] = Query("asc"),
    limit: Optional[int] = Query(
        None,
        ge=1,
        le=MAX_QUERY_LIMIT,
        description=f"Maximum number of patients to return (1-{MAX_QUERY_LIMIT}). "
                    f"Defaults to {DEFAULT_QUERY_LIMIT} if not specified."
    ),
    patient_service: PatientService = Depends(get_patient_service)
):
    """
    Patient list.

    `total` counts every patient; `showing` counts the returned rows.
    Stats (active, delivered, high risk, due soon) cover the filtered list.
    """
    effective_limit = limit
    if effective_limit is None:
        effective_limit = DEFAULT_QUERY_LIMIT
        logger.warning(
            "No limit specified for patient list, applying default",
            extra={"default_limit": DEFAULT_QUERY_LIMIT}
        )

    filters = PatientFilters(
        search=search,
        trimester=trimester,
        visit_operator=visit_operator,
        visit_count=visit_count,
        risk_levels=risk_level,
        statuses=status,
        age_range=(min_age, max_age),
        due_within_days=due_within_days,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return patient_service.list_patients(filters, effective_limit)


@router.get(
    "/trimesters",
    response_model=List[TrimesterGroup],
    summary="Patients grouped by trimester"
)
async def trimester_view(patient_service: PatientService = Depends(get_patient_service)):
    return patient_service.trimester_groups()


@router.get(
    "/categories/{category}",
    response_model=CategoryRecipients,
    summary="Resolve a broadcast category",
    description="Patients a broadcast to this category would reach."
)
async def category_recipients(
    category: str,
    patient_service: PatientService = Depends(get_patient_service)
):
    return patient_service.category_recipients(category)


# =============================================================================
# SINGLE PATIENT
# =============================================================================

@router.post(
    "",
    response_model=PatientDetailResponse,
    status_code=201,
    summary="Register a patient",
    description="Create an ANC record from the Add Patient form."
)
async def create_patient(
    patient: PatientCreate,
    patient_service: PatientService = Depends(get_patient_service)
):
    return patient_service.create_patient(patient)


@router.get(
    "/{patient_id}",
    response_model=PatientDetailResponse,
    summary="Patient detail",
    responses={404: {"description": "No such patient document."}}
)
async def get_patient(
    patient_id: str,
    patient_service: PatientService = Depends(get_patient_service)
):
    """
    Flattened registration data (basicInfo, first visit pregnancy and
    vitals) plus the derived summary and every recorded visit.
    """
    return patient_service.get_patient(patient_id)


@router.patch(
    "/{patient_id}",
    response_model=PatientDetailResponse,
    summary="Update basic info"
)
async def update_patient(
    patient_id: str,
    update: BasicInfoUpdate,
    patient_service: PatientService = Depends(get_patient_service)
):
    return patient_service.update_basic_info(patient_id, update)


@router.put(
    "/{patient_id}/visits/{visit_key}",
    response_model=PatientDetailResponse,
    summary="Record a visit",
    description="Write visit1..visit8 or visitdelivery. Replaces any previous data for that visit."
)
async def record_visit(
    patient_id: str,
    visit_key: str,
    visit: VisitRecord,
    patient_service: PatientService = Depends(get_patient_service)
):
    return patient_service.record_visit(patient_id, visit_key, visit.data)


@router.delete(
    "/{patient_id}",
    status_code=204,
    summary="Delete a patient"
)
async def delete_patient(
    patient_id: str,
    patient_service: PatientService = Depends(get_patient_service)
):
    patient_service.delete_patient(patient_id)
    return Response(status_code=204)
