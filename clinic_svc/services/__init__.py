"""
Service layer for business logic.

This module contains all business logic and orchestration services.

Note: the chart service lives in its own package:
- from services.charts import ChartService
"""
from services.patient_service import PatientService, PatientFilters
from services.notification_service import NotificationService
from services.education_service import EducationService
from services.report_service import ReportService
from services.dashboard_service import DashboardService

__all__ = [
    "PatientService",
    "PatientFilters",
    "NotificationService",
    "EducationService",
    "ReportService",
    "DashboardService",
]
