"""
FastAPI Dependency Injection configuration for the clinic service.

This module provides the dependency injection (DI) infrastructure. It enables:
- Clean separation between API, Service, and Repository layers
- Easy testing with fake dependencies via app.dependency_overrides
- Centralized construction of every repository and service

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (Business Logic)
         ↓ Injected
    Repository Layer (Document collections)
         ↓ Injected
    Database (SQLite documents table)

Usage in Routers:
    from core.dependencies import get_patient_service

    @router.get("/patients")
    async def list_patients(patient_service: PatientService = Depends(get_patient_service)):
        ...

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_patient_service] = lambda: test_patient_service
"""
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

# Lazy import to avoid circular dependencies
_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (created once, then reused).

    Returns:
        Database: The configured database instance.
    """
    global _database_instance

    if _database_instance is None:
        from repositories.base import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.clinic_svc_db_busy_timeout
        )

    return _database_instance


def reset_database() -> None:
    """
    Reset the database instance (for testing only).
    """
    global _database_instance
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_anc_record_repository() -> "AncRecordRepository":
    """Repository for ANC record documents."""
    from repositories import AncRecordRepository
    return AncRecordRepository(db=get_database())


def get_notification_repository() -> "NotificationRepository":
    from repositories import NotificationRepository
    return NotificationRepository(db=get_database())


def get_template_repository() -> "TemplateRepository":
    from repositories import TemplateRepository
    return TemplateRepository(db=get_database())


def get_settings_repository() -> "SettingsRepository":
    from repositories import SettingsRepository
    return SettingsRepository(db=get_database())


def get_tip_repository() -> "HealthTipRepository":
    from repositories import HealthTipRepository
    return HealthTipRepository(db=get_database())


def get_video_repository() -> "HealthVideoRepository":
    from repositories import HealthVideoRepository
    return HealthVideoRepository(db=get_database())


def get_chart_repository() -> "ChartRepository":
    from repositories import ChartRepository
    return ChartRepository(db=get_database())


def get_report_repository() -> "ReportRepository":
    from repositories import ReportRepository
    return ReportRepository(db=get_database())


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_patient_service() -> "PatientService":
    """
    Get a PatientService instance with its repository injected.

    Returns:
        PatientService: Service for ANC record views and CRUD.
    """
    from services import PatientService

    return PatientService(
        anc_record_repository=get_anc_record_repository(),
        due_soon_days=settings.clinic_svc_due_soon_days,
    )


def get_notification_service() -> "NotificationService":
    """
    Get a NotificationService with its three repositories and the
    patient service used for broadcast recipients.
    """
    from services import NotificationService

    return NotificationService(
        notification_repository=get_notification_repository(),
        template_repository=get_template_repository(),
        settings_repository=get_settings_repository(),
        patient_service=get_patient_service(),
    )


def get_education_service() -> "EducationService":
    from services import EducationService

    return EducationService(
        tip_repository=get_tip_repository(),
        video_repository=get_video_repository(),
        patient_service=get_patient_service(),
        notification_service=get_notification_service(),
    )


def get_chart_service() -> "ChartService":
    """
    Get a ChartService instance.

    Returns:
        ChartService: Service for chart CRUD and Plotly figures.
    """
    from services.charts import ChartService

    return ChartService(chart_repository=get_chart_repository())


def get_report_service() -> "ReportService":
    from services import ReportService

    return ReportService(report_repository=get_report_repository())


def get_dashboard_service() -> "DashboardService":
    from services import DashboardService

    return DashboardService(
        patient_service=get_patient_service(),
        notification_service=get_notification_service(),
        education_service=get_education_service(),
        report_service=get_report_service(),
    )
