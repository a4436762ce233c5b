"""
Education router - health tips and videos.

All endpoints require API key authentication.

Architecture:
    HTTP Request → Router (this file) → EducationService → repositories → Database
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from schemas import (
    TipCreate,
    TipUpdate,
    TipResponse,
    TipStats,
    TipSendResponse,
    VideoCreate,
    VideoResponse,
    PatientSummaryResponse,
)
from services import EducationService
from services.patient_service import to_response
from core.auth import verify_api_key
from core.dependencies import get_education_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/education",
    tags=["Health Education"],
    dependencies=[Depends(verify_api_key)],
)


# =============================================================================
# TIPS
# =============================================================================

@router.get("/tips", response_model=List[TipResponse], summary="List health tips")
async def list_tips(
    category: Optional[str] = Query(None, description="health or nutrition"),
    stage: str = Query("all", description="Target stage, or 'all'"),
    search: str = Query("", description="Title substring"),
    education_service: EducationService = Depends(get_education_service)
):
    return education_service.list_tips(category=category, stage=stage, search=search)


@router.get("/tips/stats", response_model=TipStats, summary="Tip statistics")
async def tip_stats(education_service: EducationService = Depends(get_education_service)):
    return education_service.tip_stats()


@router.post("/tips", response_model=TipResponse, status_code=201, summary="Create a tip")
async def create_tip(
    tip: TipCreate,
    education_service: EducationService = Depends(get_education_service)
):
    """
    Create a tip. `target_weeks` and `target_visits` accept a list of
    integers or a comma separated string such as "4, 8, 12".
    """
    return education_service.create_tip(tip)


@router.get("/tips/{tip_id}", response_model=TipResponse, summary="Get a tip")
async def get_tip(tip_id: str, education_service: EducationService = Depends(get_education_service)):
    return education_service.get_tip(tip_id)


@router.patch("/tips/{tip_id}", response_model=TipResponse, summary="Update a tip")
async def update_tip(
    tip_id: str,
    update: TipUpdate,
    education_service: EducationService = Depends(get_education_service)
):
    return education_service.update_tip(tip_id, update)


@router.delete("/tips/{tip_id}", status_code=204, summary="Delete a tip")
async def delete_tip(tip_id: str, education_service: EducationService = Depends(get_education_service)):
    education_service.delete_tip(tip_id)
    return Response(status_code=204)


@router.get(
    "/tips/{tip_id}/eligible",
    response_model=List[PatientSummaryResponse],
    summary="Patients a tip would be sent to"
)
async def eligible_patients(tip_id: str, education_service: EducationService = Depends(get_education_service)):
    return [to_response(p) for p in education_service.eligible_patients(tip_id)]


@router.post(
    "/tips/{tip_id}/send",
    response_model=TipSendResponse,
    summary="Send a tip to eligible patients",
    responses={409: {"description": "Tip is not active"}}
)
async def send_tip(tip_id: str, education_service: EducationService = Depends(get_education_service)):
    return education_service.send_tip(tip_id)


# =============================================================================
# VIDEOS
# =============================================================================

@router.get("/videos", response_model=List[VideoResponse], summary="List health videos")
async def list_videos(
    stage: str = Query("all"),
    education_service: EducationService = Depends(get_education_service)
):
    return education_service.list_videos(stage=stage)


@router.post("/videos", response_model=VideoResponse, status_code=201, summary="Add a video")
async def create_video(
    video: VideoCreate,
    education_service: EducationService = Depends(get_education_service)
):
    return education_service.create_video(video)


@router.delete("/videos/{video_id}", status_code=204, summary="Delete a video")
async def delete_video(video_id: str, education_service: EducationService = Depends(get_education_service)):
    education_service.delete_video(video_id)
    return Response(status_code=204)
