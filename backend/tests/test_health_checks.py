"""
Unit tests for health checks and the /health endpoint.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine

from edpsych_connect.monitoring.health_checks import (
    HealthStatus,
    check_database,
    check_memory,
    overall_status,
    perform_health_check,
)


def memory_probe(percent):
    return lambda: SimpleNamespace(percent=percent, used=int(percent) * 1024, total=100 * 1024)


class TestOverallStatus:
    @pytest.mark.parametrize("statuses,expected", [
        ([HealthStatus.HEALTHY, HealthStatus.HEALTHY], HealthStatus.HEALTHY),
        ([HealthStatus.HEALTHY, HealthStatus.DEGRADED], HealthStatus.DEGRADED),
        ([HealthStatus.DEGRADED, HealthStatus.UNHEALTHY], HealthStatus.UNHEALTHY),
        (["healthy", "unhealthy"], HealthStatus.UNHEALTHY),
        ([], HealthStatus.HEALTHY),
    ])
    def test_worst_status_wins(self, statuses, expected):
        assert overall_status(statuses) == expected


class TestCheckMemory:
    @pytest.mark.parametrize("percent,expected", [
        (40.0, HealthStatus.HEALTHY),
        (74.9, HealthStatus.HEALTHY),
        (75.0, HealthStatus.DEGRADED),
        (89.9, HealthStatus.DEGRADED),
        (90.0, HealthStatus.UNHEALTHY),
    ])
    def test_thresholds(self, percent, expected):
        result = check_memory(memory_probe(percent))
        assert result["status"] == expected
        assert result["percent"] == percent

    def test_custom_thresholds(self):
        result = check_memory(memory_probe(50), degraded_percent=40, unhealthy_percent=60)
        assert result["status"] == HealthStatus.DEGRADED

    def test_probe_failure_is_unhealthy(self):
        def broken():
            raise OSError("no /proc")

        result = check_memory(broken)
        assert result["status"] == HealthStatus.UNHEALTHY
        assert "no /proc" in result["error"]


class TestCheckDatabase:
    def test_reachable_database(self, engine):
        result = check_database(engine)
        assert result["status"] == HealthStatus.HEALTHY
        assert result["latency_ms"] >= 0

    def test_unreachable_database(self, tmp_path):
        missing = create_engine(f"sqlite:///{tmp_path}/missing/dir/app.db")
        result = check_database(missing)
        assert result["status"] == HealthStatus.UNHEALTHY
        assert "error" in result


class TestPerformHealthCheck:
    @pytest.mark.asyncio
    async def test_healthy_report(self, engine):
        report = await perform_health_check(engine, memory_probe=memory_probe(30))
        assert report["status"] == HealthStatus.HEALTHY
        assert set(report["checks"]) == {"database", "memory"}
        assert "timestamp" in report

    @pytest.mark.asyncio
    async def test_degraded_memory_degrades_report(self, engine):
        report = await perform_health_check(engine, memory_probe=memory_probe(80))
        assert report["status"] == HealthStatus.DEGRADED


class TestHealthEndpoint:
    def test_healthy_returns_200(self, client, monkeypatch):
        monkeypatch.setattr("psutil.virtual_memory", memory_probe(20))
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["memory"]["percent"] == 20

    def test_degraded_still_returns_200(self, client, monkeypatch):
        monkeypatch.setattr("psutil.virtual_memory", memory_probe(80))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_unhealthy_returns_503(self, client, monkeypatch):
        monkeypatch.setattr("psutil.virtual_memory", memory_probe(95))
        response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
