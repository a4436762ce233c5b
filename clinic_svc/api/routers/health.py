"""
Liveness, readiness and metrics endpoints.

- /health: the process is up (no I/O)
- /ready: the document database answers and the content catalog loads
- /metrics, /metrics/json: request counters and latency percentiles

No authentication; these are scraped by infrastructure.
"""
import logging
import sqlite3
import time
from typing import Any, Callable, Dict, List, Optional

import yaml
from fastapi import APIRouter, Response
from pydantic import BaseModel

from core.content_catalog import get_catalog
from core.datetime_utils import utc_now, format_iso
from core.dependencies import get_database
from core.middleware import get_metrics_collector

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

SERVICE_NAME = "HealthyMother Clinic Service API"
SERVICE_VERSION = "1.0.0"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str


class DependencyStatus(BaseModel):
    name: str
    status: str  # "ok" or "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class MetricsResponse(BaseModel):
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_requests_slow_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float
    http_requests_by_area: Dict[str, int]


# =============================================================================
# LIVENESS
# =============================================================================

@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=SERVICE_VERSION, timestamp=format_iso(utc_now()))


# =============================================================================
# READINESS
# =============================================================================

def _ping_database() -> str:
    get_database().ping()
    return "SQLite connection healthy"


def _load_catalog() -> str:
    catalog = get_catalog()
    return f"{len(catalog.broadcast_categories)} broadcast categories, {len(catalog.tip_stages)} tip stages"


_CHECKS: Dict[str, Callable[[], str]] = {
    "database": _ping_database,
    "catalog": _load_catalog,
}


def _run_check(name: str, check: Callable[[], str]) -> DependencyStatus:
    start = time.perf_counter()
    try:
        message = check()
        state = "ok"
    except (sqlite3.Error, OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Readiness check failed", extra={"dependency": name, "error": str(e)})
        message = f"{type(e).__name__}: {e}"
        state = "unavailable"
    return DependencyStatus(
        name=name,
        status=state,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        message=message,
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="503 when the database or the content catalog is unavailable."
)
async def readiness_check(response: Response) -> ReadyResponse:
    dependencies = [_run_check(name, check) for name, check in _CHECKS.items()]
    ready = all(d.status == "ok" for d in dependencies)
    if not ready:
        response.status_code = 503
    return ReadyResponse(
        status="ready" if ready else "not_ready",
        dependencies=dependencies,
        timestamp=format_iso(utc_now()),
    )


# =============================================================================
# METRICS
# =============================================================================

@router.get("/metrics", summary="Prometheus metrics")
async def get_metrics() -> Response:
    """
    Prometheus text format.

    Counters: http_requests_total, http_requests_by_status{status},
    http_requests_by_area{area}, http_requests_slow_total.
    Gauges: http_request_duration_ms{quantile}.
    """
    return Response(
        content=get_metrics_collector().get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get("/metrics/json", response_model=MetricsResponse, summary="JSON metrics")
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())


@router.get("/", summary="API root")
async def root() -> Dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics",
    }
