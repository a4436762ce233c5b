"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.patients import router as patients_router
from api.routers.notifications import router as notifications_router
from api.routers.education import router as education_router
from api.routers.charts import router as charts_router
from api.routers.reports import router as reports_router
from api.routers.dashboard import router as dashboard_router
from api.routers.meta import router as meta_router

__all__ = [
    "health_router",
    "patients_router",
    "notifications_router",
    "education_router",
    "charts_router",
    "reports_router",
    "dashboard_router",
    "meta_router",
]
