"""
Service layer for notifications, broadcasts, templates and settings.

Architecture:
    API Layer (routers) → NotificationService → Notification/Template/Settings
                                               repositories → Database
                          NotificationService → PatientService (recipients)

Broadcasts are addressed to patient categories rather than patient ids;
the recipient count is resolved from the current ANC records when the
broadcast is created.
"""
import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from core.content_catalog import get_catalog, broadcast_category_name, default_settings
from core.datetime_utils import utc_now, format_iso, parse_datetime, parse_document_datetime
from core.exceptions import (
    DocumentNotFoundError,
    InvalidDocumentError,
    BroadcastDisabledError,
    RemindersDisabledError,
)
from repositories import NotificationRepository, TemplateRepository, SettingsRepository
from schemas import (
    BroadcastCreate,
    ReminderCreate,
    NotificationResponse,
    NotificationListResponse,
    NotificationStats,
    BroadcastCategoryResponse,
    TemplateCreate,
    TemplateUpdate,
    TemplateResponse,
    TemplateRenderResponse,
    NotificationSettings,
    NotificationSettingsUpdate,
)
from services.patient_service import PatientService

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_DATE_FIELDS = ("sentAt", "scheduledFor", "createdAt")


def template_placeholders(message: str) -> List[str]:
    """Placeholder names in order of first appearance."""
    seen: List[str] = []
    for name in _PLACEHOLDER.findall(message):
        if name not in seen:
            seen.append(name)
    return seen


def render_message(message: str, values: Dict[str, str]) -> str:
    """Fill {placeholder} fields; unknown placeholders are left as written."""
    return _PLACEHOLDER.sub(lambda m: str(values.get(m.group(1), m.group(0))), message)


def _iso_or_raw(value: Any) -> Optional[str]:
    """Normalize a stored date to ISO; unparseable strings are kept for display."""
    if value is None or value == "":
        return None
    parsed = parse_document_datetime(value)
    if parsed is not None:
        return format_iso(parsed)
    return str(value)


def _newest_first(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    dated = [(parse_document_datetime(d.get("createdAt")), d) for d in documents]
    present = [pair for pair in dated if pair[0] is not None]
    missing = [d for when, d in dated if when is None]
    present.sort(key=lambda pair: pair[0], reverse=True)
    return [d for _, d in present] + missing


def to_notification_response(document: Dict[str, Any]) -> NotificationResponse:
    data = dict(document)
    for key in _DATE_FIELDS:
        data[key] = _iso_or_raw(data.get(key))
    data.setdefault("status", "pending")
    data.setdefault("type", "broadcast")
    return NotificationResponse(**data)


def to_template_response(document: Dict[str, Any]) -> TemplateResponse:
    message = document.get("message", "")
    return TemplateResponse(
        id=document["id"],
        name=document.get("name", ""),
        category=document.get("category", ""),
        message=message,
        placeholders=template_placeholders(message),
    )


class NotificationService:
    """
    Service layer for notification operations.

    Handles broadcast and reminder creation, the notification log,
    message templates and the notification settings document.
    """

    def __init__(
        self,
        notification_repository: NotificationRepository,
        template_repository: TemplateRepository,
        settings_repository: SettingsRepository,
        patient_service: PatientService,
        now: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the notification service.

        Args:
            notification_repository: Repository for the notification log.
            template_repository: Repository for message templates.
            settings_repository: Repository for the settings document.
            patient_service: Resolves broadcast categories to patients.
            now: Clock used for sentAt/createdAt.
        """
        self._notifications = notification_repository
        self._templates = template_repository
        self._settings = settings_repository
        self._patients = patient_service
        self._now = now

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def get_settings(self) -> NotificationSettings:
        """Stored settings over the catalog defaults."""
        merged = default_settings()
        merged.update(self._settings.load() or {})
        return NotificationSettings(**merged)

    def update_settings(self, update: NotificationSettingsUpdate) -> NotificationSettings:
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        timing = changes.get("reminderTiming")
        allowed = get_catalog().reminder_timings
        if timing is not None and timing not in allowed:
            raise InvalidDocumentError(
                f"reminderTiming must be one of {list(allowed)} hours",
                reminderTiming=timing,
            )

        merged = self.get_settings().model_dump()
        merged.update(changes)
        self._settings.save(merged)
        logger.info("Notification settings updated", extra={"fields": sorted(changes)})
        return NotificationSettings(**merged)

    # =========================================================================
    # SENDING
    # =========================================================================

    def create_broadcast(self, broadcast: BroadcastCreate) -> NotificationResponse:
        """
        Record a broadcast to one or more patient categories.

        Raises:
            BroadcastDisabledError: If broadcasts are switched off.
            InvalidDocumentError: For unknown categories or a past schedule.
            DocumentNotFoundError: If template_id does not exist.
        """
        if not self.get_settings().broadcastEnabled:
            raise BroadcastDisabledError()

        message = (broadcast.message or "").strip()
        if not message:
            message = self.render_template(broadcast.template_id, broadcast.template_values).message

        recipients = self._patients.resolve_categories(broadcast.categories)
        now = self._now()

        document: Dict[str, Any] = {
            "type": "broadcast",
            "title": broadcast.title,
            "message": message,
            "recipient": ", ".join(broadcast_category_name(c) for c in broadcast.categories),
            "categories": list(broadcast.categories),
            "recipientCount": len(recipients),
            "createdAt": format_iso(now),
        }
        if broadcast.template_id:
            document["templateId"] = broadcast.template_id

        if broadcast.schedule_type == "later":
            scheduled = parse_datetime(f"{broadcast.schedule_date.isoformat()}T{broadcast.schedule_time.isoformat()}")
            if scheduled <= now:
                raise InvalidDocumentError("Scheduled time must be in the future", scheduledFor=format_iso(scheduled))
            document.update(status="pending", sentAt=None, scheduledFor=format_iso(scheduled))
        else:
            document.update(status="sent", sentAt=format_iso(now), scheduledFor=None)

        created = self._notifications.add(document)
        logger.info(
            "Broadcast recorded",
            extra={
                "notification_id": created["id"],
                "categories": broadcast.categories,
                "recipient_count": len(recipients),
                "status": document["status"],
            }
        )
        return to_notification_response(created)

    def create_reminder(self, reminder: ReminderCreate) -> NotificationResponse:
        """
        Record an appointment reminder for one patient.

        Raises:
            RemindersDisabledError: If appointment reminders are switched off.
            PatientNotFoundError: If patient_id is given and does not exist.
        """
        if not self.get_settings().appointmentReminders:
            raise RemindersDisabledError()

        if reminder.patient_id:
            self._patients.get_patient(reminder.patient_id)

        scheduled_for = None
        if reminder.scheduled_for:
            try:
                scheduled_for = format_iso(parse_datetime(reminder.scheduled_for))
            except ValueError as e:
                raise InvalidDocumentError(str(e), scheduled_for=reminder.scheduled_for) from e

        now = format_iso(self._now())
        created = self._notifications.add({
            "type": "appointment_reminder",
            "title": reminder.title,
            "message": reminder.message,
            "recipient": reminder.recipient,
            "patientId": reminder.patient_id,
            "categories": [],
            "recipientCount": 1,
            "status": "sent",
            "sentAt": now,
            "scheduledFor": scheduled_for,
            "createdAt": now,
        })
        logger.info("Reminder recorded", extra={"notification_id": created["id"]})
        return to_notification_response(created)

    def record_tip_notification(self, tip: Dict[str, Any], recipient_count: int) -> Dict[str, Any]:
        """Log a health tip send in the notification history."""
        now = format_iso(self._now())
        return self._notifications.add({
            "type": "health_tip",
            "title": tip.get("title", ""),
            "message": tip.get("content", ""),
            "recipient": f"{recipient_count} eligible patients",
            "categories": [],
            "recipientCount": recipient_count,
            "status": "sent",
            "sentAt": now,
            "scheduledFor": None,
            "createdAt": now,
            "tipId": tip["id"],
        })

    # =========================================================================
    # NOTIFICATION LOG
    # =========================================================================

    def list_notifications(self, search: str = "", status: str = "all", limit: Optional[int] = None) -> NotificationListResponse:
        """Notifications matching search and status, newest first."""
        term = search.strip().lower()
        documents = self._notifications.list_all()
        matched = [
            d for d in documents
            if (not term
                or term in str(d.get("recipient", "")).lower()
                or term in str(d.get("message", "")).lower())
            and (status == "all" or d.get("status") == status)
        ]
        ordered = _newest_first(matched)
        shown = ordered[:limit] if limit is not None else ordered
        return NotificationListResponse(
            notifications=[to_notification_response(d) for d in shown],
            total=len(documents),
            showing=len(shown),
        )

    def recent(self, limit: int = RECENT_LIMIT) -> List[NotificationResponse]:
        return [to_notification_response(d) for d in _newest_first(self._notifications.list_all())[:limit]]

    def count(self) -> int:
        return self._notifications.count()

    def stats(self) -> NotificationStats:
        catalog = get_catalog()
        by_status = {s: 0 for s in catalog.notification_statuses}
        by_type = {t: 0 for t in catalog.notification_types}
        documents = self._notifications.list_all()
        for d in documents:
            status = d.get("status", "pending")
            by_status[status] = by_status.get(status, 0) + 1
            kind = d.get("type", "broadcast")
            by_type[kind] = by_type.get(kind, 0) + 1
        return NotificationStats(total=len(documents), by_status=by_status, by_type=by_type)

    def get_notification(self, notification_id: str) -> NotificationResponse:
        document = self._notifications.get(notification_id)
        if document is None:
            raise DocumentNotFoundError(NotificationRepository.COLLECTION, notification_id)
        return to_notification_response(document)

    def update_status(self, notification_id: str, status: str) -> NotificationResponse:
        """Change delivery status; marking sent or delivered stamps sentAt once."""
        document = self._notifications.get(notification_id)
        if document is None:
            raise DocumentNotFoundError(NotificationRepository.COLLECTION, notification_id)

        changes: Dict[str, Any] = {"status": status}
        if status in ("sent", "delivered") and not document.get("sentAt"):
            changes["sentAt"] = format_iso(self._now())
        updated = self._notifications.update(notification_id, changes)
        if updated is None:
            raise DocumentNotFoundError(NotificationRepository.COLLECTION, notification_id)
        logger.info("Notification status changed", extra={"notification_id": notification_id, "status": status})
        return to_notification_response(updated)

    def delete_notification(self, notification_id: str) -> None:
        if not self._notifications.delete(notification_id):
            raise DocumentNotFoundError(NotificationRepository.COLLECTION, notification_id)

    def categories(self) -> List[BroadcastCategoryResponse]:
        counts = self._patients.category_counts()
        return [
            BroadcastCategoryResponse(id=entry.id, name=entry.name, count=counts.get(entry.id, 0))
            for entry in get_catalog().broadcast_categories
        ]

    # =========================================================================
    # TEMPLATES
    # =========================================================================

    def _get_template(self, template_id: str) -> Dict[str, Any]:
        document = self._templates.get(template_id)
        if document is None:
            raise DocumentNotFoundError(TemplateRepository.COLLECTION, template_id)
        return document

    def list_templates(self) -> List[TemplateResponse]:
        return [to_template_response(d) for d in self._templates.list_all()]

    def create_template(self, template: TemplateCreate) -> TemplateResponse:
        created = self._templates.add(template.model_dump())
        logger.info("Template created", extra={"template_id": created["id"]})
        return to_template_response(created)

    def update_template(self, template_id: str, update: TemplateUpdate) -> TemplateResponse:
        self._get_template(template_id)
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise InvalidDocumentError("No fields to update")
        return to_template_response(self._templates.update(template_id, changes))

    def delete_template(self, template_id: str) -> None:
        if not self._templates.delete(template_id):
            raise DocumentNotFoundError(TemplateRepository.COLLECTION, template_id)

    def render_template(self, template_id: str, values: Dict[str, str]) -> TemplateRenderResponse:
        template = self._get_template(template_id)
        return TemplateRenderResponse(id=template_id, message=render_message(template.get("message", ""), values))

    def seed_default_templates(self) -> int:
        """
        Create the catalog's default templates when none exist.

        Returns:
            Number of templates created.
        """
        if self._templates.count() > 0:
            return 0
        seeds = get_catalog().default_templates
        for seed in seeds:
            self._templates.add({"name": seed.name, "category": seed.category, "message": seed.message})
        logger.info("Default templates seeded", extra={"count": len(seeds)})
        return len(seeds)
