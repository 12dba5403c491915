"""
Unit tests for the alert registry.

Covers threshold semantics, cooldown suppression, resolution, webhook
dispatch and persisted alert events.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import ValidationError

from edpsych_connect.models import AlertEvent
from edpsych_connect.monitoring.alerting import AlertChannel, AlertConfig, AlertRegistry


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    registry = AlertRegistry(clock=clock)
    registry.register_alert(AlertConfig(name="cpu", threshold=80, cooldown_seconds=60))
    return registry


class TestAlertConfig:
    def test_defaults(self):
        config = AlertConfig(name="memory", threshold=90)
        assert config.cooldown_seconds == 300
        assert config.severity == "warning"
        assert [c.type for c in config.channels] == ["log"]

    def test_webhook_requires_target(self):
        with pytest.raises(ValidationError):
            AlertChannel(type="webhook")

    def test_rejects_negative_cooldown(self):
        with pytest.raises(ValidationError):
            AlertConfig(name="cpu", threshold=1, cooldown_seconds=-1)

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            AlertConfig(name="", threshold=1)


class TestTriggerAlert:
    @pytest.mark.asyncio
    async def test_below_threshold_is_not_triggered(self, registry):
        assert await registry.trigger_alert("cpu", 79) is False
        state = registry.get_alert_state("cpu")
        assert state.triggered is False
        assert state.fire_count == 0
        assert state.last_value == 79

    @pytest.mark.asyncio
    async def test_threshold_value_triggers(self, registry):
        assert await registry.trigger_alert("cpu", 80) is True
        state = registry.get_alert_state("cpu")
        assert state.triggered is True
        assert state.fire_count == 1
        assert state.last_fired_at is not None

    @pytest.mark.asyncio
    async def test_unknown_alert_returns_false(self, registry):
        assert await registry.trigger_alert("disk", 100) is False

    @pytest.mark.asyncio
    async def test_cooldown_suppresses_refire(self, registry, clock):
        registry._dispatch = AsyncMock()
        assert await registry.trigger_alert("cpu", 95) is True
        clock.advance(30)
        assert await registry.trigger_alert("cpu", 97) is True
        assert registry._dispatch.await_count == 1
        assert registry.get_alert_state("cpu").fire_count == 1

    @pytest.mark.asyncio
    async def test_refires_after_cooldown(self, registry, clock):
        registry._dispatch = AsyncMock()
        await registry.trigger_alert("cpu", 95)
        clock.advance(60)
        await registry.trigger_alert("cpu", 95)
        assert registry._dispatch.await_count == 2
        assert registry.get_alert_state("cpu").fire_count == 2

    @pytest.mark.asyncio
    async def test_resolve_does_not_reset_cooldown(self, registry, clock):
        registry._dispatch = AsyncMock()
        await registry.trigger_alert("cpu", 95)
        assert await registry.trigger_alert("cpu", 10) is False
        assert registry.get_alert_state("cpu").triggered is False
        clock.advance(10)
        assert await registry.trigger_alert("cpu", 95) is True
        assert registry._dispatch.await_count == 1

    @pytest.mark.asyncio
    async def test_zero_cooldown_fires_every_time(self, clock):
        registry = AlertRegistry(clock=clock)
        registry.register_alert(AlertConfig(name="errors", threshold=1, cooldown_seconds=0))
        registry._dispatch = AsyncMock()
        for _ in range(3):
            await registry.trigger_alert("errors", 5)
        assert registry._dispatch.await_count == 3


class TestDispatch:
    @pytest.mark.asyncio
    async def test_webhook_receives_payload(self, clock):
        http_client = MagicMock()
        http_client.post = AsyncMock(return_value=MagicMock())
        registry = AlertRegistry(clock=clock, http_client=http_client)
        registry.register_alert(AlertConfig(
            name="latency",
            threshold=500,
            severity="critical",
            channels=[AlertChannel(type="webhook", target="https://hooks.example.com/alerts")],
        ))

        await registry.trigger_alert("latency", 750, {"route": "/api/health"})

        http_client.post.assert_awaited_once()
        url = http_client.post.await_args.args[0]
        payload = http_client.post.await_args.kwargs["json"]
        assert url == "https://hooks.example.com/alerts"
        assert payload["name"] == "latency"
        assert payload["severity"] == "critical"
        assert payload["value"] == 750
        assert payload["context"] == {"route": "/api/health"}

    @pytest.mark.asyncio
    async def test_failing_channel_does_not_block_others(self, clock, caplog):
        http_client = MagicMock()
        http_client.post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        registry = AlertRegistry(clock=clock, http_client=http_client)
        registry.register_alert(AlertConfig(
            name="latency",
            threshold=500,
            channels=[
                AlertChannel(type="webhook", target="https://hooks.example.com/alerts"),
                AlertChannel(type="log"),
            ],
        ))

        with caplog.at_level("WARNING"):
            assert await registry.trigger_alert("latency", 900) is True

        messages = [r.getMessage() for r in caplog.records]
        assert any("Alert channel webhook failed" in m for m in messages)
        assert any(m.startswith("ALERT latency") for m in messages)


    @pytest.mark.asyncio
    async def test_log_channel_accepts_any_context_keys(self, registry, caplog):
        context = {"message": "spike", "level": "high", "logger": "agent"}
        with caplog.at_level("WARNING"):
            assert await registry.trigger_alert("cpu", 95, context) is True

        messages = [r.getMessage() for r in caplog.records]
        assert not any("Alert channel log failed" in m for m in messages)
        alert_lines = [m for m in messages if m.startswith("ALERT cpu")]
        assert len(alert_lines) == 1
        assert "message='spike'" in alert_lines[0]


class TestRegistry:
    def test_list_and_unregister(self, registry):
        assert [c.name for c in registry.list_alerts()] == ["cpu"]
        assert registry.unregister_alert("cpu") is True
        assert registry.unregister_alert("cpu") is False
        assert registry.get_alert_state("cpu") is None

    def test_register_replaces_state(self, registry):
        registry.register_alert(AlertConfig(name="cpu", threshold=50))
        assert registry.list_alerts()[0].threshold == 50


class TestAlertEvents:
    @pytest.mark.asyncio
    async def test_fired_and_resolved_events_are_recorded(self, clock, session_factory):
        registry = AlertRegistry(clock=clock, session_factory=session_factory)
        registry.register_alert(AlertConfig(name="cpu", threshold=80))

        await registry.trigger_alert("cpu", 90, {"host": "web-1"})
        await registry.trigger_alert("cpu", 20)
        await registry.trigger_alert("cpu", 10)

        db = session_factory()
        try:
            events = db.query(AlertEvent).order_by(AlertEvent.id).all()
        finally:
            db.close()
        assert [e.kind for e in events] == ["fired", "resolved"]
        assert events[0].value == 90
        assert '"host": "web-1"' in events[0].context_json
