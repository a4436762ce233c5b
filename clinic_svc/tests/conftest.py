"""
Shared pytest fixtures for API tests.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: Use app.dependency_overrides to inject test dependencies
3. Fixed clock: services see TODAY / NOW so date arithmetic is stable

Fixture Hierarchy:
    temp_db → repositories → services → test_app → client
"""
import os
import tempfile
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from fastapi import FastAPI

# Set test configuration before importing config modules
# This must happen before any config imports
TEST_API_KEY = "test-api-key-for-testing-purposes-12345678"
os.environ.setdefault("CLINIC_SVC_API_KEY", TEST_API_KEY)
os.environ.setdefault("CLINIC_SVC_DB_DIR", tempfile.mkdtemp(prefix="clinic-svc-test-"))

from repositories.base import Database
from repositories import (
    AncRecordRepository,
    NotificationRepository,
    TemplateRepository,
    SettingsRepository,
    HealthTipRepository,
    HealthVideoRepository,
    ChartRepository,
    ReportRepository,
)
from services import (
    PatientService,
    NotificationService,
    EducationService,
    ReportService,
    DashboardService,
)
from services.charts import ChartService
from core.exceptions import setup_exception_handlers
from core import dependencies as deps
from core.auth import verify_api_key

TODAY = date(2024, 6, 1)
NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    This fixture creates a fresh SQLite database in a temp file,
    ensuring complete isolation between tests.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    # Cleanup (WAL mode leaves side files)
    for path in (db_path, db_path + "-wal", db_path + "-shm"):
        if os.path.exists(path):
            os.unlink(path)


# =============================================================================
# REPOSITORIES
# =============================================================================

@pytest.fixture
def anc_repo(temp_db):
    return AncRecordRepository(db=temp_db)


@pytest.fixture
def notification_repo(temp_db):
    return NotificationRepository(db=temp_db)


@pytest.fixture
def template_repo(temp_db):
    return TemplateRepository(db=temp_db)


@pytest.fixture
def settings_repo(temp_db):
    return SettingsRepository(db=temp_db)


@pytest.fixture
def tip_repo(temp_db):
    return HealthTipRepository(db=temp_db)


@pytest.fixture
def video_repo(temp_db):
    return HealthVideoRepository(db=temp_db)


@pytest.fixture
def chart_repo(temp_db):
    return ChartRepository(db=temp_db)


@pytest.fixture
def report_repo(temp_db):
    return ReportRepository(db=temp_db)


# =============================================================================
# SERVICES
# =============================================================================

@pytest.fixture
def patient_service(anc_repo):
    """PatientService whose reference date is TODAY."""
    return PatientService(anc_record_repository=anc_repo, due_soon_days=30, today=lambda: TODAY)


@pytest.fixture
def notification_service(notification_repo, template_repo, settings_repo, patient_service):
    return NotificationService(
        notification_repository=notification_repo,
        template_repository=template_repo,
        settings_repository=settings_repo,
        patient_service=patient_service,
        now=lambda: NOW,
    )


@pytest.fixture
def education_service(tip_repo, video_repo, patient_service, notification_service):
    return EducationService(
        tip_repository=tip_repo,
        video_repository=video_repo,
        patient_service=patient_service,
        notification_service=notification_service,
        now=lambda: NOW,
    )


@pytest.fixture
def chart_service(chart_repo):
    return ChartService(chart_repository=chart_repo, now=lambda: NOW)


@pytest.fixture
def report_service(report_repo):
    return ReportService(report_repository=report_repo, now=lambda: NOW)


@pytest.fixture
def dashboard_service(patient_service, notification_service, education_service, report_service):
    return DashboardService(
        patient_service=patient_service,
        notification_service=notification_service,
        education_service=education_service,
        report_service=report_service,
    )


# =============================================================================
# DOCUMENT FACTORIES
# =============================================================================

@pytest.fixture
def add_anc_record(anc_repo):
    """
    Factory inserting an ANC record.

    `weeks_at_contact` is recorded on visit1 together with a contact date
    `days_ago` before TODAY, so current weeks = weeks_at_contact + days_ago // 7.
    """
    def _add(
        name="Ama Mensah",
        age=28,
        weeks_at_contact=10,
        days_ago=0,
        visits=1,
        delivered=False,
        risk_level="Low",
        edd=None,
        email="",
        phone="",
        top_level_info=True,
        next_visit=None,
    ):
        info = {
            "clientName": name,
            "age": age,
            "riskLevel": risk_level,
            "email": email,
            "phoneNumber": phone,
        }
        contact = TODAY - timedelta(days=days_ago)
        pregnancy = {"gestationalAge": weeks_at_contact, "dateOfAncContact": contact.isoformat()}
        if edd is not None:
            pregnancy["edd"] = edd.isoformat()

        document = {}
        if top_level_info:
            document["basicInfo"] = info
        document["visit1"] = {
            "basicInfo": info,
            "presentPregnancy": pregnancy,
            "vitals": {"bloodPressure": "110/70", "weight": 62},
        }
        for number in range(2, visits + 1):
            document[f"visit{number}"] = {
                "presentPregnancy": {"dateOfAncContact": (contact + timedelta(weeks=4 * (number - 1))).isoformat()},
            }
        if next_visit is not None:
            document[f"visit{max(visits, 1)}"]["nextVisitDate"] = next_visit.isoformat()
        if delivered:
            document["visitdelivery"] = {"deliveryDate": TODAY.isoformat(), "outcome": "live birth"}
        return anc_repo.add(document)

    return _add


# =============================================================================
# APP
# =============================================================================

@pytest.fixture
def test_app(
    temp_db,
    patient_service,
    notification_service,
    education_service,
    chart_service,
    report_service,
    dashboard_service,
):
    """
    Create a FastAPI test app with dependency overrides.

    - Uses the real routers (testing actual endpoint code)
    - Injects test database and services via dependency_overrides
    - Registers exception handlers for proper error response testing
    """
    from api.routers import (
        health_router,
        patients_router,
        notifications_router,
        education_router,
        charts_router,
        reports_router,
        dashboard_router,
        meta_router,
    )

    app = FastAPI(title="Clinic Service API Test")

    # Register exception handlers (same as production)
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db
    app.dependency_overrides[deps.get_patient_service] = lambda: patient_service
    app.dependency_overrides[deps.get_notification_service] = lambda: notification_service
    app.dependency_overrides[deps.get_education_service] = lambda: education_service
    app.dependency_overrides[deps.get_chart_service] = lambda: chart_service
    app.dependency_overrides[deps.get_report_service] = lambda: report_service
    app.dependency_overrides[deps.get_dashboard_service] = lambda: dashboard_service

    # Override auth to skip API key verification in tests
    async def skip_auth():
        return TEST_API_KEY
    app.dependency_overrides[verify_api_key] = skip_auth

    for router in (
        health_router,
        meta_router,
        dashboard_router,
        patients_router,
        notifications_router,
        education_router,
        charts_router,
        reports_router,
    ):
        app.include_router(router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)
