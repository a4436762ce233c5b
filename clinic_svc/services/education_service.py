"""
Service layer for health education: tips and videos.

Architecture:
    API Layer (routers) → EducationService → HealthTip/HealthVideo repositories
                          EducationService → PatientService (eligibility)
                          EducationService → NotificationService (send log)
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from core.datetime_utils import utc_now, format_iso, parse_document_datetime
from core.exceptions import DocumentNotFoundError, InvalidDocumentError, InactiveTipError
from models.anc_record import PatientSummary
from repositories import HealthTipRepository, HealthVideoRepository
from schemas import (
    TipCreate,
    TipUpdate,
    TipResponse,
    TipStats,
    TipSendResponse,
    VideoCreate,
    VideoResponse,
)
from services.patient_service import PatientService
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

DELIVERY_STAGE = "delivery"

# API field name -> document key
_TIP_FIELDS = {
    "title": "title",
    "content": "content",
    "category": "category",
    "target_stage": "targetStage",
    "target_weeks": "targetWeeks",
    "target_visits": "targetVisits",
    "is_active": "isActive",
}


def _created_at(document: Dict[str, Any]) -> Optional[str]:
    parsed = parse_document_datetime(document.get("createdAt"))
    return format_iso(parsed) if parsed else None


def _newest_first(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    dated = [(parse_document_datetime(d.get("createdAt")), d) for d in documents]
    present = sorted((pair for pair in dated if pair[0] is not None), key=lambda pair: pair[0], reverse=True)
    return [d for _, d in present] + [d for when, d in dated if when is None]


def to_tip_response(document: Dict[str, Any]) -> TipResponse:
    return TipResponse(
        id=document["id"],
        title=document.get("title", ""),
        content=document.get("content", ""),
        category=document.get("category", "health"),
        targetStage=document.get("targetStage", ""),
        targetWeeks=document.get("targetWeeks"),
        targetVisits=document.get("targetVisits"),
        createdAt=_created_at(document),
        sentCount=int(document.get("sentCount") or 0),
        isActive=document.get("isActive", True),
    )


def to_video_response(document: Dict[str, Any]) -> VideoResponse:
    return VideoResponse(
        id=document["id"],
        title=document.get("title", ""),
        url=document.get("url", ""),
        description=document.get("description", ""),
        category=document.get("category", "health"),
        targetStage=document.get("targetStage", ""),
        createdAt=_created_at(document),
    )


def is_eligible(tip: Dict[str, Any], patient: PatientSummary) -> bool:
    """
    Whether a tip applies to a patient.

    Delivery tips go to delivered patients, all other stages to patients
    still pregnant. Target lists, when present, must contain the patient's
    current weeks and visit count.
    """
    if tip.get("targetStage") == DELIVERY_STAGE:
        if not patient.has_delivered:
            return False
    elif patient.has_delivered:
        return False

    target_weeks = tip.get("targetWeeks")
    if target_weeks is not None and patient.weeks not in target_weeks:
        return False
    target_visits = tip.get("targetVisits")
    if target_visits is not None and patient.visit_count not in target_visits:
        return False
    return True


class EducationService:
    """
    Service layer for health tips and videos.
    """

    def __init__(
        self,
        tip_repository: HealthTipRepository,
        video_repository: HealthVideoRepository,
        patient_service: PatientService,
        notification_service: NotificationService,
        now: Callable[[], datetime] = utc_now,
    ):
        self._tips = tip_repository
        self._videos = video_repository
        self._patients = patient_service
        self._notifications = notification_service
        self._now = now

    # =========================================================================
    # TIPS
    # =========================================================================

    def _get_tip(self, tip_id: str) -> Dict[str, Any]:
        document = self._tips.get(tip_id)
        if document is None:
            raise DocumentNotFoundError(HealthTipRepository.COLLECTION, tip_id)
        return document

    def list_tips(self, category: Optional[str] = None, stage: str = "all", search: str = "") -> List[TipResponse]:
        """Tips filtered by category, stage ("all" for any) and title text."""
        term = search.strip().lower()
        documents = [
            d for d in self._tips.list_all()
            if (category in (None, "", "all") or d.get("category") == category)
            and (stage in ("", "all") or d.get("targetStage") == stage)
            and (not term or term in str(d.get("title", "")).lower())
        ]
        return [to_tip_response(d) for d in _newest_first(documents)]

    def get_tip(self, tip_id: str) -> TipResponse:
        return to_tip_response(self._get_tip(tip_id))

    def create_tip(self, tip: TipCreate) -> TipResponse:
        document = {_TIP_FIELDS[k]: v for k, v in tip.model_dump().items()}
        document.update(createdAt=format_iso(self._now()), sentCount=0)
        created = self._tips.add(document)
        logger.info("Health tip created", extra={"tip_id": created["id"], "stage": tip.target_stage})
        return to_tip_response(created)

    def update_tip(self, tip_id: str, update: TipUpdate) -> TipResponse:
        """Apply the fields present in the request; explicit null clears target lists."""
        self._get_tip(tip_id)
        raw = update.model_dump(exclude_unset=True)
        changes = {
            _TIP_FIELDS[k]: v for k, v in raw.items()
            if v is not None or k in ("target_weeks", "target_visits")
        }
        if not changes:
            raise InvalidDocumentError("No fields to update")
        return to_tip_response(self._tips.update(tip_id, changes))

    def delete_tip(self, tip_id: str) -> None:
        if not self._tips.delete(tip_id):
            raise DocumentNotFoundError(HealthTipRepository.COLLECTION, tip_id)

    def tip_stats(self) -> TipStats:
        tips = self._tips.list_all()
        patients = self._patients.summaries()
        return TipStats(
            total_tips=len(tips),
            active_tips=sum(1 for t in tips if t.get("isActive", True)),
            total_sent=sum(int(t.get("sentCount") or 0) for t in tips),
            eligible_patients=sum(1 for p in patients if not p.has_delivered),
        )

    def active_tip_count(self) -> int:
        return sum(1 for t in self._tips.list_all() if t.get("isActive", True))

    def eligible_patients(self, tip_id: str) -> List[PatientSummary]:
        tip = self._get_tip(tip_id)
        return [p for p in self._patients.summaries() if is_eligible(tip, p)]

    def send_tip(self, tip_id: str) -> TipSendResponse:
        """
        Send a tip to every eligible patient.

        Raises:
            DocumentNotFoundError: If the tip does not exist.
            InactiveTipError: If the tip is switched off.
        """
        tip = self._get_tip(tip_id)
        if not tip.get("isActive", True):
            raise InactiveTipError(tip_id=tip_id)

        eligible = [p for p in self._patients.summaries() if is_eligible(tip, p)]
        notification = self._notifications.record_tip_notification(tip, len(eligible))
        updated = self._tips.increment_sent_count(tip_id, len(eligible))
        if updated is None:
            raise DocumentNotFoundError(HealthTipRepository.COLLECTION, tip_id)

        logger.info("Health tip sent", extra={"tip_id": tip_id, "sent_to": len(eligible)})
        return TipSendResponse(
            tip_id=tip_id,
            sent_to=len(eligible),
            sent_count=updated["sentCount"],
            notification_id=notification["id"],
        )

    # =========================================================================
    # VIDEOS
    # =========================================================================

    def list_videos(self, stage: str = "all") -> List[VideoResponse]:
        documents = [
            d for d in self._videos.list_all()
            if stage in ("", "all") or d.get("targetStage") == stage
        ]
        return [to_video_response(d) for d in _newest_first(documents)]

    def create_video(self, video: VideoCreate) -> VideoResponse:
        created = self._videos.add({
            "title": video.title,
            "url": video.url,
            "description": video.description,
            "category": video.category,
            "targetStage": video.target_stage,
            "createdAt": format_iso(self._now()),
        })
        logger.info("Health video created", extra={"video_id": created["id"]})
        return to_video_response(created)

    def delete_video(self, video_id: str) -> None:
        if not self._videos.delete(video_id):
            raise DocumentNotFoundError(HealthVideoRepository.COLLECTION, video_id)
