"""
Core module for application configuration, logging, and shared constants.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling for document dates
- Pregnancy arithmetic: gestational age and trimester bucketing
- Content catalog: broadcast categories, tip stages and defaults from catalog.yaml
"""
from core.config import settings, Settings

# Dependency injection - import functions for FastAPI Depends()
from core.dependencies import (
    get_database,
    get_patient_service,
    get_notification_service,
    get_education_service,
    get_chart_service,
    get_report_service,
    get_dashboard_service,
    reset_database,
)

# Exception classes for consistent error handling
from core.exceptions import (
    ClinicServiceError,
    DocumentNotFoundError,
    PatientNotFoundError,
    InvalidDocumentError,
    BroadcastDisabledError,
    RemindersDisabledError,
    InactiveTipError,
    DatabaseError,
    setup_exception_handlers,
)

# UTC datetime utilities
from core.datetime_utils import (
    utc_now,
    utc_today,
    to_utc,
    parse_datetime,
    parse_document_datetime,
    parse_document_date,
    format_iso,
)
from core.config import (
    DATABASE_DIR,
    DATABASE_FILE,
    DATABASE_PATH,
    API_HOST,
    API_PORT,
    API_RELOAD,
    DEFAULT_QUERY_LIMIT,
    MAX_QUERY_LIMIT,
    DUE_SOON_DAYS,
)

from core.pregnancy import current_gestational_age, trimester_for, TRIMESTER_LABELS
from core.content_catalog import get_catalog, broadcast_category_name

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_database",
    "get_patient_service",
    "get_notification_service",
    "get_education_service",
    "get_chart_service",
    "get_report_service",
    "get_dashboard_service",
    "reset_database",
    # Exceptions
    "ClinicServiceError",
    "DocumentNotFoundError",
    "PatientNotFoundError",
    "InvalidDocumentError",
    "BroadcastDisabledError",
    "RemindersDisabledError",
    "InactiveTipError",
    "DatabaseError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "utc_today",
    "to_utc",
    "parse_datetime",
    "parse_document_datetime",
    "parse_document_date",
    "format_iso",
    # Configuration exports
    "DATABASE_DIR",
    "DATABASE_FILE",
    "DATABASE_PATH",
    "API_HOST",
    "API_PORT",
    "API_RELOAD",
    "DEFAULT_QUERY_LIMIT",
    "MAX_QUERY_LIMIT",
    "DUE_SOON_DAYS",
    # Domain helpers
    "current_gestational_age",
    "trimester_for",
    "TRIMESTER_LABELS",
    "get_catalog",
    "broadcast_category_name",
]
