"""
Prometheus metrics for the Sector Mapping Server.

Provides counters, histograms and gauges for monitoring:
- HTTP requests and MCP tool invocations with latency
- ATECO search result sizes
- Sector resolution outcomes
- Health status and reference data sizes
"""

import time
from collections.abc import Callable
from functools import wraps
from threading import Lock
from typing import Any, TypeVar

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, Info, generate_latest

_metrics_lock = Lock()
_initialized = False


# --- Metric Definitions ---

# Request-level metrics (HTTP endpoints and MCP tools share these)
REQUESTS = Counter(
    "sector_requests_total",
    "Total number of requests by endpoint or tool",
    ["endpoint", "status"],
)

REQUEST_DURATION = Histogram(
    "sector_request_duration_seconds",
    "Request handling duration in seconds",
    ["endpoint"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

REQUEST_ERRORS = Counter(
    "sector_request_errors_total",
    "Total number of request errors",
    ["endpoint", "error_type"],
)

# Lookup metrics
ATECO_SEARCH_RESULTS = Histogram(
    "sector_ateco_search_results_count",
    "Number of results returned per ATECO search",
    buckets=[0, 1, 2, 5, 10, 20, 52],
)

SECTOR_RESOLUTIONS = Counter(
    "sector_resolutions_total",
    "Onboarding sector resolutions",
    ["outcome"],  # resolved, unrecognized
)

RESOLVED_SECTORS = Counter(
    "sector_resolved_sector_total",
    "Resolutions per onboarding sector",
    ["sector"],
)

# Health metrics
HEALTH_STATUS = Gauge(
    "sector_health_status",
    "Overall health status (1=healthy, 0.5=degraded, 0=unhealthy)",
)

UPTIME_SECONDS = Gauge(
    "sector_uptime_seconds",
    "Server uptime in seconds",
)

DATA_STATS = Gauge(
    "sector_reference_data_size",
    "Reference data table sizes",
    ["table"],
)

SERVER_INFO = Info(
    "sector_server",
    "Sector Mapping Server information",
)


# --- Timer Context Manager ---


class Timer:
    """Context manager for timing operations and recording to histograms."""

    def __init__(self, histogram: Histogram, labels: dict[str, str] | None = None):
        self.histogram = histogram
        self.labels = labels or {}
        self.start_time: float | None = None
        self.duration: float | None = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            self.duration = time.perf_counter() - self.start_time
            if self.labels:
                self.histogram.labels(**self.labels).observe(self.duration)
            else:
                self.histogram.observe(self.duration)

    @property
    def elapsed_ms(self) -> int:
        """Get elapsed time in milliseconds."""
        if self.duration is not None:
            return int(self.duration * 1000)
        if self.start_time is not None:
            return int((time.perf_counter() - self.start_time) * 1000)
        return 0


# --- Decorators ---

F = TypeVar("F", bound=Callable[..., Any])


def track_tool_metrics(func: F) -> F:
    """
    Decorator to track metrics for MCP tool invocations.

    Records request count by status, duration and error count by type,
    labelled with the tool's function name.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        tool_name = func.__name__

        try:
            with Timer(REQUEST_DURATION, {"endpoint": tool_name}):
                result = await func(*args, **kwargs)

            REQUESTS.labels(endpoint=tool_name, status="success").inc()
            return result

        except Exception as e:
            record_request_error(tool_name, type(e).__name__)
            raise

    return wrapper  # type: ignore


# --- Helper Functions ---


def record_request(endpoint: str, status: str, duration_seconds: float | None = None) -> None:
    """Record a completed request for an HTTP endpoint."""
    REQUESTS.labels(endpoint=endpoint, status=status).inc()
    if duration_seconds is not None:
        REQUEST_DURATION.labels(endpoint=endpoint).observe(duration_seconds)


def record_request_error(endpoint: str, error_type: str) -> None:
    """Record a failed request."""
    REQUESTS.labels(endpoint=endpoint, status="failure").inc()
    REQUEST_ERRORS.labels(endpoint=endpoint, error_type=error_type).inc()


def record_ateco_search(results_count: int) -> None:
    """Record the size of an ATECO search result."""
    ATECO_SEARCH_RESULTS.observe(results_count)


def record_sector_resolution(sector: str | None) -> None:
    """Record a resolution attempt; None means the sector was not recognized."""
    if sector is None:
        SECTOR_RESOLUTIONS.labels(outcome="unrecognized").inc()
        return
    SECTOR_RESOLUTIONS.labels(outcome="resolved").inc()
    RESOLVED_SECTORS.labels(sector=sector).inc()


def update_health_status(status: str, uptime_seconds: float | None = None) -> None:
    """
    Update health status metrics.

    Args:
        status: Overall status (healthy, degraded, unhealthy)
        uptime_seconds: Server uptime
    """
    status_values = {"healthy": 1.0, "degraded": 0.5, "unhealthy": 0.0}
    HEALTH_STATUS.set(status_values.get(status, 0.0))

    if uptime_seconds is not None:
        UPTIME_SECONDS.set(uptime_seconds)


def update_data_stats(stats: dict[str, int]) -> None:
    """Update reference data size gauges from ReferenceTables.get_statistics()."""
    for table, count in stats.items():
        DATA_STATS.labels(table=table).set(count)


# --- Metrics Export ---


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)


def get_metrics_text() -> str:
    """Generate Prometheus metrics as a string."""
    return generate_latest(REGISTRY).decode("utf-8")


# --- Initialization ---


def initialize_metrics(version: str = "0.1.0", stats: dict[str, int] | None = None) -> None:
    """
    Initialize metrics with server information.

    Call this once at server startup.
    """
    global _initialized

    with _metrics_lock:
        if _initialized:
            return

        SERVER_INFO.info({"version": version})
        HEALTH_STATUS.set(0.0)
        if stats:
            update_data_stats(stats)

        _initialized = True


def reset_metrics() -> None:
    """Reset initialization state (for testing)."""
    global _initialized
    _initialized = False
