"""
FastAPI application entry point for the HealthyMother Clinic Service API.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging
- Request ID Propagation: UUID-based request tracking across logs
- Dependency Injection: Services and repositories injected via Depends()
- Exception Handling: Consistent error responses via setup_exception_handlers()
- CORS Middleware: Allows the dashboard front end to call the API
- Lifespan Management: Database initialization and default template seeding
- Metrics Collection: In-memory metrics for Prometheus scraping

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack (order matters!)                          │
    │    ├── LoggingMiddleware  - Request logging & metrics       │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py         - /health, /ready, /metrics        │
    │    ├── patients.py       - ANC records, trimester views     │
    │    ├── notifications.py  - Broadcasts, templates, settings  │
    │    ├── education.py      - Health tips and videos           │
    │    ├── charts.py         - Dashboard charts, Plotly figures │
    │    ├── reports.py        - Whistleblower reports            │
    │    ├── dashboard.py      - Overview and sidebar counts      │
    │    └── meta.py           - Clinic vocabulary (public)       │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)   ← one per collection        │
    ├─────────────────────────────────────────────────────────────┤
    │  Database (SQLite documents table)                          │
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD
from core.dependencies import get_database, get_notification_service
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
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


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Startup:
        - Configures structured JSON logging
        - Initializes the database (triggers schema creation)
        - Seeds the default notification templates when none exist

    Shutdown:
        - Logs shutdown message
    """
    # =========================================================================
    # STARTUP
    # =========================================================================

    # Configure structured logging FIRST (before any other logging)
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Clinic Service API...")

    db = get_database()
    logger.info(
        "Database initialized",
        extra={"db_path": db.db_path}
    )

    seeded = get_notification_service().seed_default_templates()
    if seeded:
        logger.info("Seeded default notification templates", extra={"count": seeded})

    yield  # Application runs here

    # =========================================================================
    # SHUTDOWN
    # =========================================================================
    logger.info("Clinic Service API shutting down...")


# Create FastAPI app with lifespan context
app = FastAPI(
    title="HealthyMother Clinic Service API",
    description="REST API for maternal-health clinic administration: ANC records, trimester views, "
                "notifications and broadcasts, health education, dashboard charts and whistleblower reports.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================
# ClinicServiceError and its subclasses are converted to HTTP responses.
setup_exception_handlers(app)

# =============================================================================
# MIDDLEWARE
# =============================================================================
# Middleware is executed in REVERSE order of registration.

# 1. CORS Middleware (innermost - closest to routes)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2. Logging Middleware (outermost - captures all requests)
app.add_middleware(LoggingMiddleware)

# =============================================================================
# ROUTERS
# =============================================================================
app.include_router(health_router)
app.include_router(meta_router)
app.include_router(dashboard_router)
app.include_router(patients_router)
app.include_router(notifications_router)
app.include_router(education_router)
app.include_router(charts_router)
app.include_router(reports_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
