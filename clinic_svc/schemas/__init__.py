"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.patient import (
    PatientCreate,
    BasicInfoUpdate,
    VisitRecord,
    PatientSummaryResponse,
    PatientDetailResponse,
    PatientStats,
    PatientListResponse,
    TrimesterGroup,
    CategoryRecipients,
)
from schemas.notification import (
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
from schemas.education import (
    TipCreate,
    TipUpdate,
    TipResponse,
    TipStats,
    TipSendResponse,
    VideoCreate,
    VideoResponse,
)
from schemas.chart import ChartCreate, ChartUpdate, ChartResponse, ChartStats
from schemas.report import ReportCreate, ReportResponse, ReportListResponse
from schemas.dashboard import DashboardOverview, SidebarCounts

__all__ = [
    # Patient schemas
    "PatientCreate",
    "BasicInfoUpdate",
    "VisitRecord",
    "PatientSummaryResponse",
    "PatientDetailResponse",
    "PatientStats",
    "PatientListResponse",
    "TrimesterGroup",
    "CategoryRecipients",
    # Notification schemas
    "BroadcastCreate",
    "ReminderCreate",
    "NotificationResponse",
    "NotificationListResponse",
    "NotificationStatusUpdate",
    "NotificationCount",
    "NotificationStats",
    "BroadcastCategoryResponse",
    "TemplateCreate",
    "TemplateUpdate",
    "TemplateResponse",
    "TemplateRenderRequest",
    "TemplateRenderResponse",
    "NotificationSettings",
    "NotificationSettingsUpdate",
    # Education schemas
    "TipCreate",
    "TipUpdate",
    "TipResponse",
    "TipStats",
    "TipSendResponse",
    "VideoCreate",
    "VideoResponse",
    # Chart schemas
    "ChartCreate",
    "ChartUpdate",
    "ChartResponse",
    "ChartStats",
    # Report schemas
    "ReportCreate",
    "ReportResponse",
    "ReportListResponse",
    # Dashboard schemas
    "DashboardOverview",
    "SidebarCounts",
]
