"""
Request logging middleware and in-memory request metrics.

Every request gets a short id that is attached to its log lines and
returned in the X-Request-ID header. Completed requests feed the
MetricsCollector behind /metrics, which also breaks traffic down by
dashboard area (patients, notifications, education, ...).
"""

import logging
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import set_request_id, clear_request_id

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/"
HISTORY_SIZE = 1000
SLOW_REQUEST_MS = 1000.0


AREAS = frozenset({"patients", "notifications", "education", "charts", "reports", "dashboard", "meta"})


def area_for(path: str) -> str:
    """
    Dashboard area of a path.

    Known router prefixes under /api/v1/ map to themselves, other API paths
    to "other" and everything else to "system", so the label set stays fixed.
    """
    if not path.startswith(API_PREFIX):
        return "system"
    segment = path[len(API_PREFIX):].split("/", 1)[0]
    return segment if segment in AREAS else "other"


@dataclass
class RequestMetrics:
    """One completed request."""
    timestamp: datetime
    method: str
    path: str
    status_code: int
    duration_ms: float
    request_id: str

    @property
    def status_class(self) -> str:
        return f"{self.status_code // 100}xx"


@dataclass
class MetricsCollector:
    """
    Process-lifetime request counters plus a bounded latency window.

    Percentiles are computed over the last HISTORY_SIZE requests only.
    """
    _requests: Deque[RequestMetrics] = field(default_factory=lambda: deque(maxlen=HISTORY_SIZE))
    by_status: Counter = field(default_factory=Counter)
    by_area: Counter = field(default_factory=Counter)
    slow_requests: int = 0

    @property
    def total_requests(self) -> int:
        return sum(self.by_status.values())

    def record_request(self, metrics: RequestMetrics) -> None:
        self._requests.append(metrics)
        self.by_status[metrics.status_class] += 1
        self.by_area[area_for(metrics.path)] += 1
        if metrics.duration_ms >= SLOW_REQUEST_MS:
            self.slow_requests += 1

    def get_latency_percentiles(self) -> Dict[str, float]:
        """p50/p95/p99 latency in milliseconds, 0 when nothing was recorded."""
        durations = sorted(r.duration_ms for r in self._requests)
        if not durations:
            return {"p50": 0, "p95": 0, "p99": 0}

        last = len(durations) - 1
        return {
            f"p{p}": round(durations[min(len(durations) * p // 100, last)], 2)
            for p in (50, 95, 99)
        }

    def get_summary(self) -> Dict:
        """Flat metrics map served by /metrics/json."""
        summary = {"http_requests_total": self.total_requests}
        for status_class in ("2xx", "4xx", "5xx"):
            summary[f"http_requests_{status_class}_total"] = self.by_status.get(status_class, 0)
        summary["http_requests_slow_total"] = self.slow_requests
        for name, value in self.get_latency_percentiles().items():
            summary[f"http_request_duration_ms_{name}"] = value
        summary["http_requests_by_area"] = dict(sorted(self.by_area.items()))
        return summary

    def get_prometheus_format(self) -> str:
        """Prometheus text exposition of the summary."""
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f"http_requests_total {summary['http_requests_total']}",
            "",
            "# HELP http_requests_by_status HTTP requests by status class",
            "# TYPE http_requests_by_status counter",
        ]
        for status_class in ("2xx", "4xx", "5xx"):
            lines.append(f'http_requests_by_status{{status="{status_class}"}} '
                         f"{summary[f'http_requests_{status_class}_total']}")
        lines += [
            "",
            "# HELP http_requests_by_area HTTP requests by dashboard area",
            "# TYPE http_requests_by_area counter",
        ]
        for area, count in summary["http_requests_by_area"].items():
            lines.append(f'http_requests_by_area{{area="{area}"}} {count}')
        lines += [
            "",
            f"# HELP http_requests_slow_total Requests slower than {SLOW_REQUEST_MS:g} ms",
            "# TYPE http_requests_slow_total counter",
            f"http_requests_slow_total {summary['http_requests_slow_total']}",
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
        ]
        for quantile, name in (("0.5", "p50"), ("0.95", "p95"), ("0.99", "p99")):
            lines.append(f'http_request_duration_ms{{quantile="{quantile}"}} '
                         f"{summary[f'http_request_duration_ms_{name}']}")
        return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    return metrics_collector


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request id, access logging and metrics for every request.

    Probe and docs paths are counted but not logged.
    """

    QUIET_PATHS = frozenset({"/health", "/ready", "/metrics", "/metrics/json", "/docs", "/redoc", "/openapi.json"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        set_request_id(request_id)
        path = request.url.path
        log_it = path not in self.QUIET_PATHS
        started = time.perf_counter()

        if log_it:
            logger.info(
                "Request started",
                extra={"method": request.method, "path": path, "area": area_for(path)}
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled error while serving request",
                extra={"method": request.method, "path": path, "error": str(e)}
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            clear_request_id()

        metrics_collector.record_request(RequestMetrics(
            timestamp=datetime.now(timezone.utc),
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            request_id=request_id,
        ))

        if log_it:
            if response.status_code >= 400 or duration_ms >= SLOW_REQUEST_MS:
                level = logging.WARNING
            else:
                level = logging.INFO
            logger.log(
                level,
                "Request completed",
                extra={
                    "method": request.method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                    "request_id": request_id,
                }
            )

        response.headers["X-Request-ID"] = request_id
        return response
