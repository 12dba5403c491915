from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

import psutil
from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..settings import settings

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
	HEALTHY = "healthy"
	DEGRADED = "degraded"
	UNHEALTHY = "unhealthy"


def overall_status(statuses: Iterable[HealthStatus]) -> HealthStatus:
	statuses = [HealthStatus(s) for s in statuses]
	if HealthStatus.UNHEALTHY in statuses:
		return HealthStatus.UNHEALTHY
	if HealthStatus.DEGRADED in statuses:
		return HealthStatus.DEGRADED
	return HealthStatus.HEALTHY


def check_database(engine: Engine) -> Dict[str, Any]:
	started = time.perf_counter()
	try:
		with engine.connect() as conn:
			conn.execute(text("SELECT 1"))
	except Exception as e:
		logger.error("Database health check failed: %s", e)
		return {"status": HealthStatus.UNHEALTHY, "error": str(e)}
	return {
		"status": HealthStatus.HEALTHY,
		"latency_ms": round((time.perf_counter() - started) * 1000, 2),
	}


def check_memory(
	probe: Callable[[], Any] = psutil.virtual_memory,
	degraded_percent: Optional[float] = None,
	unhealthy_percent: Optional[float] = None,
) -> Dict[str, Any]:
	"""Classify system memory usage; ``probe`` returns a psutil-style record."""
	if degraded_percent is None:
		degraded_percent = settings.memory_degraded_percent
	if unhealthy_percent is None:
		unhealthy_percent = settings.memory_unhealthy_percent
	try:
		memory = probe()
		percent = float(memory.percent)
	except Exception as e:
		logger.error("Memory health check failed: %s", e)
		return {"status": HealthStatus.UNHEALTHY, "error": str(e)}
	if percent >= unhealthy_percent:
		status = HealthStatus.UNHEALTHY
	elif percent >= degraded_percent:
		status = HealthStatus.DEGRADED
	else:
		status = HealthStatus.HEALTHY
	return {
		"status": status,
		"percent": round(percent, 2),
		"used_bytes": int(getattr(memory, "used", 0)),
		"total_bytes": int(getattr(memory, "total", 0)),
	}


async def perform_health_check(
	engine: Optional[Engine] = None,
	memory_probe: Optional[Callable[[], Any]] = None,
) -> Dict[str, Any]:
	if engine is None:
		from ..db import engine
	database, memory = await asyncio.gather(
		asyncio.to_thread(check_database, engine),
		asyncio.to_thread(check_memory, memory_probe or psutil.virtual_memory),
	)
	status = overall_status([database["status"], memory["status"]])
	if status != HealthStatus.HEALTHY:
		logger.warning("Health check %s: database=%s memory=%s", status.value, database["status"].value, memory["status"].value)
	return {
		"status": status,
		"timestamp": datetime.now(timezone.utc).isoformat(),
		"environment": settings.environment,
		"error_tracking_configured": bool(settings.sentry_dsn),
		"checks": {"database": database, "memory": memory},
	}
