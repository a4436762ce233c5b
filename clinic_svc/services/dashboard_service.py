"""
Service layer for the dashboard overview and sidebar badges.

Aggregates counts from the other services; it owns no data.
"""
import logging

from core.pregnancy import TRIMESTER_LABELS
from schemas import DashboardOverview, SidebarCounts
from services.patient_service import PatientService
from services.notification_service import NotificationService
from services.education_service import EducationService
from services.report_service import ReportService

logger = logging.getLogger(__name__)


class DashboardService:
    """Read-only aggregation over patients, notifications, reports and tips."""

    def __init__(
        self,
        patient_service: PatientService,
        notification_service: NotificationService,
        education_service: EducationService,
        report_service: ReportService,
    ):
        self._patients = patient_service
        self._notifications = notification_service
        self._education = education_service
        self._reports = report_service

    def overview(self) -> DashboardOverview:
        patients = self._patients.summaries()
        stats = self._patients.compute_stats(patients)
        trimesters = {label: 0 for label in TRIMESTER_LABELS}
        for patient in patients:
            trimesters[patient.trimester] += 1

        return DashboardOverview(
            total_patients=len(patients),
            active_patients=stats.active,
            delivered_patients=stats.delivered,
            high_risk_patients=stats.high_risk,
            due_soon=stats.due_soon,
            trimesters=trimesters,
            notifications=self._notifications.count(),
            reports=self._reports.count(),
            active_tips=self._education.active_tip_count(),
        )

    def sidebar_counts(self) -> SidebarCounts:
        return SidebarCounts(
            patients=self._patients.count(),
            notifications=self._notifications.count(),
        )
