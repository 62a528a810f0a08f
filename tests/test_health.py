"""
Unit tests for health check module.

Tests health check functionality for liveness, readiness, and detailed diagnostics.
"""

from datetime import UTC, datetime

import pytest

from sector_mapping_server.core.health import (
    ComponentHealth,
    ComponentStatus,
    HealthChecker,
    HealthCheckResult,
    HealthStatus,
    liveness_check,
    readiness_check,
)
from sector_mapping_server.core.reference_data import build_reference_tables


class TestComponentHealth:
    """Tests for ComponentHealth dataclass."""

    def test_to_dict_minimal(self):
        """Only the status is included by default."""
        health = ComponentHealth(name="reference_data", status=ComponentStatus.READY)
        assert health.to_dict() == {"status": "ready"}

    def test_to_dict_full(self):
        """Message, rounded latency and details are flattened in."""
        health = ComponentHealth(
            name="sector_coverage",
            status=ComponentStatus.PARTIAL,
            message="1 sectors without mapping",
            latency_ms=1.23456,
            details={"missing": ["Other (with description)"]},
        )
        assert health.to_dict() == {
            "status": "partial",
            "message": "1 sectors without mapping",
            "latency_ms": 1.23,
            "missing": ["Other (with description)"],
        }


class TestHealthCheckResult:
    """Tests for HealthCheckResult."""

    def make_result(self, status, components=None, issues=None):
        return HealthCheckResult(
            status=status,
            timestamp=datetime(2026, 1, 1, tzinfo=UTC),
            version="0.1.0",
            uptime_seconds=12.345,
            components=components or {},
            issues=issues or [],
        )

    @pytest.mark.parametrize(
        "status,healthy,ready",
        [
            (HealthStatus.HEALTHY, True, True),
            (HealthStatus.DEGRADED, False, True),
            (HealthStatus.UNHEALTHY, False, False),
        ],
    )
    def test_flags(self, status, healthy, ready):
        """Degraded servers still count as ready."""
        result = self.make_result(status)
        assert result.is_healthy is healthy
        assert result.is_ready is ready

    def test_to_dict(self):
        """Serialization includes a component summary."""
        result = self.make_result(
            HealthStatus.DEGRADED,
            components={
                "reference_data": ComponentHealth("reference_data", ComponentStatus.READY),
                "sector_coverage": ComponentHealth("sector_coverage", ComponentStatus.PARTIAL),
            },
            issues=["Sector coverage: 1 sectors without mapping"],
        )
        data = result.to_dict()

        assert data["status"] == "degraded"
        assert data["timestamp"] == "2026-01-01T00:00:00+00:00"
        assert data["uptime_seconds"] == 12.3
        assert data["summary"] == "1/2 components ready"
        assert data["issues"] == ["Sector coverage: 1 sectors without mapping"]

    def test_to_dict_omits_empty_issues(self):
        assert "issues" not in self.make_result(HealthStatus.HEALTHY).to_dict()


class TestHealthChecker:
    """Tests for HealthChecker."""

    def test_liveness(self):
        """A running checker is always alive."""
        assert HealthChecker().is_alive() is True

    def test_uptime_increases(self):
        checker = HealthChecker()
        assert checker.uptime_seconds >= 0

    @pytest.mark.asyncio
    async def test_ready_with_tables(self, tables):
        """Loaded tables make the server ready."""
        assert await HealthChecker(tables=tables).check_readiness() is True

    @pytest.mark.asyncio
    async def test_not_ready_without_tables(self):
        """No tables means not ready."""
        assert await HealthChecker().check_readiness() is False

    @pytest.mark.asyncio
    async def test_not_ready_with_empty_tables(self):
        """Empty tables mean not ready."""
        empty = build_reference_tables(macros=(), sector_mappings=(), validate=False)
        assert await HealthChecker(tables=empty).check_readiness() is False

    @pytest.mark.asyncio
    async def test_healthy(self, tables):
        """Valid, fully covering tables are healthy."""
        result = await HealthChecker(tables=tables, version="1.2.3").check_health()

        assert result.status == HealthStatus.HEALTHY
        assert result.version == "1.2.3"
        assert result.issues == []

        data = result.components["reference_data"]
        assert data.status == ComponentStatus.READY
        assert data.details == {
            "ateco_macros": 10,
            "ateco_codes": 52,
            "damodaran_industries": 94,
            "sector_mappings": 16,
        }
        assert result.components["sector_coverage"].details == {"sectors": 16}

    @pytest.mark.asyncio
    async def test_unhealthy_without_tables(self):
        """Missing tables are unhealthy."""
        result = await HealthChecker().check_health()

        assert result.status == HealthStatus.UNHEALTHY
        assert result.components["reference_data"].status == ComponentStatus.NOT_READY
        assert "Reference data not loaded" in result.issues

    @pytest.mark.asyncio
    async def test_unhealthy_with_broken_weights(self, broken_tables):
        """Weights not summing to 100 make the data component fail."""
        result = await HealthChecker(tables=broken_tables).check_health()

        assert result.status == HealthStatus.UNHEALTHY
        component = result.components["reference_data"]
        assert component.status == ComponentStatus.ERROR
        assert "expected 100" in component.message

    @pytest.mark.asyncio
    async def test_partial_coverage_reported(self, partial_tables):
        """Unmapped sectors are listed by the coverage component."""
        result = await HealthChecker(tables=partial_tables).check_health()

        coverage = result.components["sector_coverage"]
        assert coverage.status == ComponentStatus.PARTIAL
        assert coverage.details == {"missing": ["Other (with description)"]}
        assert "Sector coverage: 1 sectors without mapping" in result.issues
        # validation also fails on the missing row
        assert result.status == HealthStatus.UNHEALTHY


class TestConvenienceFunctions:
    """Tests for liveness_check and readiness_check."""

    @pytest.mark.asyncio
    async def test_liveness_check(self):
        result = await liveness_check()
        assert result["status"] == "alive"
        assert "timestamp" in result

    @pytest.mark.asyncio
    async def test_readiness_check_ready(self, tables):
        result = await readiness_check(HealthChecker(tables=tables))
        assert result["status"] == "ready"
        assert result["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_readiness_check_not_ready(self):
        result = await readiness_check(HealthChecker())
        assert result["status"] == "not_ready"
