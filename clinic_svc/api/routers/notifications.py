"""
Notifications router - broadcasts, reminders, templates and settings.

All endpoints require API key authentication.

Architecture:
    HTTP Request → Router (this file) → NotificationService → repositories → Database
"""
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from schemas import (
    BroadcastCreate,
    ReminderCreate,
    NotificationResponse,
    NotificationListResponse,
    NotificationStatusUpdate,
    NotificationCount,
    NotificationStats,
    BroadcastCategoryResponse,
    TemplateCreate,
    TemplateUpdate,
    TemplateResponse,
    TemplateRenderRequest,
    TemplateRenderResponse,
    NotificationSettings,
    NotificationSettingsUpdate,
)
from services import NotificationService
from core.auth import verify_api_key
from core.config import MAX_QUERY_LIMIT
from core.dependencies import get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/notifications",
    tags=["Notifications"],
    dependencies=[Depends(verify_api_key)],
)


# =============================================================================
# NOTIFICATION LOG
# =============================================================================

@router.get("", response_model=NotificationListResponse, summary="List notifications")
async def list_notifications(
    search: str = Query("", description="Matches recipient or message text"),
    status: Literal["all", "sent", "delivered", "pending", "failed"] = Query("all"),
    limit: Optional[int] = Query(None, ge=1, le=MAX_QUERY_LIMIT),
    notification_service: NotificationService = Depends(get_notification_service)
):
    """Notifications newest first."""
    return notification_service.list_notifications(search=search, status=status, limit=limit)


@router.get("/recent", response_model=List[NotificationResponse], summary="Five most recent notifications")
async def recent_notifications(notification_service: NotificationService = Depends(get_notification_service)):
    return notification_service.recent()


@router.get("/count", response_model=NotificationCount, summary="Notification count for the sidebar badge")
async def notification_count(notification_service: NotificationService = Depends(get_notification_service)):
    return NotificationCount(count=notification_service.count())


@router.get("/stats", response_model=NotificationStats, summary="Totals by status and type")
async def notification_stats(notification_service: NotificationService = Depends(get_notification_service)):
    return notification_service.stats()


@router.get(
    "/categories",
    response_model=List[BroadcastCategoryResponse],
    summary="Broadcast categories with live patient counts"
)
async def broadcast_categories(notification_service: NotificationService = Depends(get_notification_service)):
    return notification_service.categories()


# =============================================================================
# SENDING
# =============================================================================

@router.post(
    "/broadcasts",
    response_model=NotificationResponse,
    status_code=201,
    summary="Send or schedule a broadcast",
    responses={409: {"description": "Broadcasts are disabled in settings"}}
)
async def create_broadcast(
    broadcast: BroadcastCreate,
    notification_service: NotificationService = Depends(get_notification_service)
):
    """
    Broadcast to patient categories.

    - **schedule_type=now**: recorded as sent
    - **schedule_type=later**: recorded as pending with scheduledFor
    """
    return notification_service.create_broadcast(broadcast)


@router.post(
    "/reminders",
    response_model=NotificationResponse,
    status_code=201,
    summary="Send an appointment reminder",
    responses={409: {"description": "Appointment reminders are disabled in settings"}}
)
async def create_reminder(
    reminder: ReminderCreate,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.create_reminder(reminder)


# =============================================================================
# SETTINGS
# =============================================================================

@router.get("/settings", response_model=NotificationSettings, summary="Notification settings")
async def get_settings(notification_service: NotificationService = Depends(get_notification_service)):
    return notification_service.get_settings()


@router.patch("/settings", response_model=NotificationSettings, summary="Update notification settings")
async def update_settings(
    update: NotificationSettingsUpdate,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.update_settings(update)


# =============================================================================
# TEMPLATES
# =============================================================================

@router.get("/templates", response_model=List[TemplateResponse], summary="List message templates")
async def list_templates(notification_service: NotificationService = Depends(get_notification_service)):
    return notification_service.list_templates()


@router.post("/templates", response_model=TemplateResponse, status_code=201, summary="Create a template")
async def create_template(
    template: TemplateCreate,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.create_template(template)


@router.patch("/templates/{template_id}", response_model=TemplateResponse, summary="Update a template")
async def update_template(
    template_id: str,
    update: TemplateUpdate,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.update_template(template_id, update)


@router.delete("/templates/{template_id}", status_code=204, summary="Delete a template")
async def delete_template(
    template_id: str,
    notification_service: NotificationService = Depends(get_notification_service)
):
    notification_service.delete_template(template_id)
    return Response(status_code=204)


@router.post(
    "/templates/{template_id}/render",
    response_model=TemplateRenderResponse,
    summary="Fill a template's placeholders"
)
async def render_template(
    template_id: str,
    request: TemplateRenderRequest,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.render_template(template_id, request.values)


# =============================================================================
# SINGLE NOTIFICATION
# =============================================================================

@router.get("/{notification_id}", response_model=NotificationResponse, summary="Get a notification")
async def get_notification(
    notification_id: str,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.get_notification(notification_id)


@router.patch("/{notification_id}/status", response_model=NotificationResponse, summary="Update delivery status")
async def update_status(
    notification_id: str,
    update: NotificationStatusUpdate,
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.update_status(notification_id, update.status)


@router.delete("/{notification_id}", status_code=204, summary="Delete a notification")
async def delete_notification(
    notification_id: str,
    notification_service: NotificationService = Depends(get_notification_service)
):
    notification_service.delete_notification(notification_id)
    return Response(status_code=204)
