from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..db import SessionLocal
from ..monitoring.alerting import AlertConfig, AlertRegistry, AlertState
from .auth import User, get_current_user

router = APIRouter(prefix="/alerts", tags=["alerts"])

_registry = AlertRegistry(session_factory=SessionLocal)


def get_alert_registry() -> AlertRegistry:
	return _registry


class TriggerRequest(BaseModel):
	value: float
	context: Optional[Dict[str, Any]] = None


class TriggerResponse(BaseModel):
	triggered: bool
	state: AlertState


@router.post("", status_code=201)
async def register_alert(
	config: AlertConfig,
	user: User = Depends(get_current_user),
	registry: AlertRegistry = Depends(get_alert_registry),
):
	registry.register_alert(config)
	return {"name": config.name}


@router.get("", response_model=List[AlertConfig])
async def list_alerts(registry: AlertRegistry = Depends(get_alert_registry)):
	return registry.list_alerts()


@router.get("/{name}", response_model=AlertState)
async def alert_state(name: str, registry: AlertRegistry = Depends(get_alert_registry)):
	state = registry.get_alert_state(name)
	if state is None:
		raise HTTPException(status_code=404, detail=f"alert not registered: {name}")
	return state


@router.post("/{name}/trigger", response_model=TriggerResponse)
async def trigger_alert(
	name: str,
	req: TriggerRequest,
	user: User = Depends(get_current_user),
	registry: AlertRegistry = Depends(get_alert_registry),
):
	if registry.get_alert_state(name) is None:
		raise HTTPException(status_code=404, detail=f"alert not registered: {name}")
	triggered = await registry.trigger_alert(name, req.value, req.context)
	return TriggerResponse(triggered=triggered, state=registry.get_alert_state(name))


@router.delete("/{name}")
async def unregister_alert(
	name: str,
	user: User = Depends(get_current_user),
	registry: AlertRegistry = Depends(get_alert_registry),
):
	if not registry.unregister_alert(name):
		raise HTTPException(status_code=404, detail=f"alert not registered: {name}")
	return {"ok": True}
