"""
Threshold alerts with a per-alert cooldown.

An alert is "triggered" whenever the reported value is at or above its
threshold. Channels only fire when the alert has never fired or when its
cooldown has elapsed since the last fire; dropping below the threshold
clears the triggered flag but does not reset the cooldown timer.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional

import httpx
from pydantic import BaseModel, Field, model_validator

from ..models import AlertEvent
from ..settings import settings
from .log import log_event

logger = logging.getLogger(__name__)


class AlertChannel(BaseModel):
	type: Literal["log", "webhook"] = "log"
	target: Optional[str] = None

	@model_validator(mode="after")
	def _webhook_needs_target(self):
		if self.type == "webhook" and not self.target:
			raise ValueError("webhook channels require a target URL")
		return self


class AlertConfig(BaseModel):
	name: str = Field(min_length=1)
	threshold: float
	cooldown_seconds: float = Field(default_factory=lambda: settings.alert_default_cooldown_seconds, ge=0)
	severity: Literal["info", "warning", "critical"] = "warning"
	message: Optional[str] = None
	channels: List[AlertChannel] = Field(default_factory=lambda: [AlertChannel()])


class AlertState(BaseModel):
	name: str
	triggered: bool = False
	last_value: Optional[float] = None
	last_fired_at: Optional[datetime] = None
	fire_count: int = 0


class _Entry:
	def __init__(self, config: AlertConfig) -> None:
		self.config = config
		self.triggered = False
		self.last_value: Optional[float] = None
		# Clock reading of the last fire, used for cooldown arithmetic
		self.last_fired: Optional[float] = None
		self.last_fired_at: Optional[datetime] = None
		self.fire_count = 0


class AlertRegistry:
	def __init__(
		self,
		*,
		clock: Callable[[], float] = time.monotonic,
		http_client: Optional[httpx.AsyncClient] = None,
		session_factory: Optional[Callable[[], Any]] = None,
	) -> None:
		self._clock = clock
		self._http_client = http_client
		self._session_factory = session_factory
		self._alerts: Dict[str, _Entry] = {}

	def register_alert(self, config: AlertConfig) -> None:
		self._alerts[config.name] = _Entry(config)
		log_event(logger, logging.INFO, "Registered alert", name=config.name, threshold=config.threshold)

	def unregister_alert(self, name: str) -> bool:
		return self._alerts.pop(name, None) is not None

	def list_alerts(self) -> List[AlertConfig]:
		return [e.config for e in self._alerts.values()]

	def get_alert_state(self, name: str) -> Optional[AlertState]:
		entry = self._alerts.get(name)
		if entry is None:
			return None
		return AlertState(
			name=name,
			triggered=entry.triggered,
			last_value=entry.last_value,
			last_fired_at=entry.last_fired_at,
			fire_count=entry.fire_count,
		)

	async def trigger_alert(self, name: str, value: float, context: Optional[Dict[str, Any]] = None) -> bool:
		entry = self._alerts.get(name)
		if entry is None:
			logger.warning("Alert not registered: %s", name)
			return False
		config = entry.config
		context = context or {}
		entry.last_value = value

		if value < config.threshold:
			if entry.triggered:
				entry.triggered = False
				log_event(logger, logging.INFO, "Alert resolved", name=name, value=value, threshold=config.threshold)
				self._record_event(config, "resolved", value, context)
			return False

		entry.triggered = True
		now = self._clock()
		if entry.last_fired is not None and now - entry.last_fired < config.cooldown_seconds:
			logger.debug("Alert %s still cooling down", name)
			return True

		entry.last_fired = now
		entry.last_fired_at = datetime.now(timezone.utc)
		entry.fire_count += 1
		self._record_event(config, "fired", value, context)
		await self._dispatch(config, value, context, entry.last_fired_at)
		return True

	async def _dispatch(self, config: AlertConfig, value: float, context: Dict[str, Any], fired_at: datetime) -> None:
		payload = {
			"name": config.name,
			"severity": config.severity,
			"value": value,
			"threshold": config.threshold,
			"message": config.message or f"{config.name} reached {value} (threshold {config.threshold})",
			"context": context,
			"triggered_at": fired_at.isoformat(),
		}
		for channel in config.channels:
			try:
				if channel.type == "webhook":
					await self._post_webhook(channel.target, payload)
				else:
					level = logging.CRITICAL if config.severity == "critical" else logging.WARNING
					log_event(logger, level, f"ALERT {config.name}: {payload['message']}", **context)
			except Exception:
				logger.exception("Alert channel %s failed for %s", channel.type, config.name)

	async def _post_webhook(self, url: str, payload: Dict[str, Any]) -> None:
		client = self._http_client
		owns_client = client is None
		if owns_client:
			client = httpx.AsyncClient(timeout=settings.alert_webhook_timeout_seconds)
		try:
			r = await client.post(url, json=payload)
			r.raise_for_status()
		finally:
			if owns_client:
				await client.aclose()

	def _record_event(self, config: AlertConfig, kind: str, value: float, context: Dict[str, Any]) -> None:
		if self._session_factory is None:
			return
		db = self._session_factory()
		try:
			db.add(AlertEvent(
				alert_name=config.name,
				kind=kind,
				severity=config.severity,
				value=value,
				threshold=config.threshold,
				context_json=json.dumps(context, default=str),
			))
			db.commit()
		except Exception:
			db.rollback()
			logger.exception("Failed to record %s event for alert %s", kind, config.name)
		finally:
			db.close()
