"""
Health check module for the Sector Mapping Server.

Provides health check endpoints for monitoring and container orchestration:
- Liveness: Is the server process alive?
- Readiness: Are the reference tables loaded and valid?
- Detailed: Full component status with diagnostics
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..models.sector_models import OnboardingSector
from .reference_data import ReferenceTables

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status levels."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentStatus(str, Enum):
    """Individual component status."""

    READY = "ready"
    PARTIAL = "partial"
    NOT_READY = "not_ready"
    ERROR = "error"


@dataclass
class ComponentHealth:
    """Health status for a single component."""

    name: str
    status: ComponentStatus
    message: str | None = None
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "status": self.status.value,
        }
        if self.message:
            result["message"] = self.message
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.details:
            result.update(self.details)
        return result


@dataclass
class HealthCheckResult:
    """Complete health check result."""

    status: HealthStatus
    timestamp: datetime
    version: str
    uptime_seconds: float
    components: dict[str, ComponentHealth] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        """True if status is healthy."""
        return self.status == HealthStatus.HEALTHY

    @property
    def is_ready(self) -> bool:
        """True if server can handle requests (healthy or degraded)."""
        return self.status in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "uptime_seconds": round(self.uptime_seconds, 1),
            "components": {
                name: component.to_dict() for name, component in self.components.items()
            },
        }
        if self.issues:
            result["issues"] = self.issues

        ready_count = sum(1 for c in self.components.values() if c.status == ComponentStatus.READY)
        result["summary"] = f"{ready_count}/{len(self.components)} components ready"

        return result


class HealthChecker:
    """
    Health checker for the Sector Mapping Server.

    Usage:
        checker = HealthChecker(tables=get_reference_tables())

        result = await checker.check_health()
        if result.is_ready:
            print("Server is ready")
    """

    def __init__(self, tables: ReferenceTables | None = None, version: str = "0.1.0"):
        """
        Initialize health checker.

        Args:
            tables: Reference tables served by this process
            version: Server version string
        """
        self.tables = tables
        self.version = version
        self._start_time = time.monotonic()

    @property
    def uptime_seconds(self) -> float:
        """Get server uptime in seconds."""
        return time.monotonic() - self._start_time

    def is_alive(self) -> bool:
        """Quick liveness check; if this runs, the process is alive."""
        return True

    async def check_readiness(self) -> bool:
        """
        Check if server is ready to handle requests.

        Ready means the reference tables are loaded and not empty.
        """
        if self.tables is None:
            return False
        return bool(self.tables.ateco_codes) and bool(self.tables.sector_mappings)

    async def check_health(self) -> HealthCheckResult:
        """Perform comprehensive health check."""
        components = {}
        issues = []

        data_health = self._check_reference_data()
        components["reference_data"] = data_health
        if data_health.status == ComponentStatus.ERROR:
            issues.append(f"Reference data: {data_health.message}")
        elif data_health.status == ComponentStatus.NOT_READY:
            issues.append("Reference data not loaded")

        coverage_health = self._check_sector_coverage()
        components["sector_coverage"] = coverage_health
        if coverage_health.status != ComponentStatus.READY and coverage_health.message:
            issues.append(f"Sector coverage: {coverage_health.message}")

        if any(c.status == ComponentStatus.ERROR for c in components.values()):
            status = HealthStatus.UNHEALTHY
        elif data_health.status == ComponentStatus.NOT_READY:
            status = HealthStatus.UNHEALTHY
        elif any(c.status != ComponentStatus.READY for c in components.values()):
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.HEALTHY

        return HealthCheckResult(
            status=status,
            timestamp=datetime.now(UTC),
            version=self.version,
            uptime_seconds=self.uptime_seconds,
            components=components,
            issues=issues,
        )

    def _check_reference_data(self) -> ComponentHealth:
        """Check that the reference tables are present and pass validation."""
        start = time.monotonic()

        if self.tables is None:
            return ComponentHealth(
                name="reference_data",
                status=ComponentStatus.NOT_READY,
                message="Reference tables not loaded",
            )

        try:
            self.tables.validate()
        except Exception as e:
            logger.error(f"Reference data health check failed: {e}")
            return ComponentHealth(
                name="reference_data",
                status=ComponentStatus.ERROR,
                message=str(e)[:100],
                latency_ms=(time.monotonic() - start) * 1000,
            )

        return ComponentHealth(
            name="reference_data",
            status=ComponentStatus.READY,
            latency_ms=(time.monotonic() - start) * 1000,
            details=self.tables.get_statistics(),
        )

    def _check_sector_coverage(self) -> ComponentHealth:
        """Check that every onboarding sector has a mapping."""
        if self.tables is None:
            return ComponentHealth(
                name="sector_coverage",
                status=ComponentStatus.NOT_READY,
            )

        mapped = set(self.tables.mapping_by_sector)
        missing = [s.value for s in OnboardingSector if s not in mapped]
        if missing:
            return ComponentHealth(
                name="sector_coverage",
                status=ComponentStatus.PARTIAL,
                message=f"{len(missing)} sectors without mapping",
                details={"missing": missing},
            )

        return ComponentHealth(
            name="sector_coverage",
            status=ComponentStatus.READY,
            details={"sectors": len(mapped)},
        )


# Convenience functions for simple health checks


async def liveness_check() -> dict[str, Any]:
    """
    Simple liveness check.

    Returns minimal response indicating server is alive.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(checker: HealthChecker) -> dict[str, Any]:
    """
    Readiness check.

    Args:
        checker: HealthChecker instance

    Returns:
        Dict with ready status and basic info
    """
    is_ready = await checker.check_readiness()
    return {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": round(checker.uptime_seconds, 1),
    }
