"""
Repository layer for database access.

Every collection is a DocumentRepository subclass over the shared
documents table.
"""
from repositories.base import Database
from repositories.document_repository import DocumentRepository, new_document_id
from repositories.anc_record_repository import (
    AncRecordRepository,
    VISIT_KEYS,
    DELIVERY_KEY,
)
from repositories.notification_repository import (
    NotificationRepository,
    TemplateRepository,
    SettingsRepository,
)
from repositories.education_repository import HealthTipRepository, HealthVideoRepository
from repositories.chart_repository import ChartRepository
from repositories.report_repository import ReportRepository

__all__ = [
    "Database",
    "DocumentRepository",
    "new_document_id",
    "AncRecordRepository",
    "VISIT_KEYS",
    "DELIVERY_KEY",
    "NotificationRepository",
    "TemplateRepository",
    "SettingsRepository",
    "HealthTipRepository",
    "HealthVideoRepository",
    "ChartRepository",
    "ReportRepository",
]
