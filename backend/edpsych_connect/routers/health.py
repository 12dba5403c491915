from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..db import get_engine
from ..monitoring.health_checks import HealthStatus, perform_health_check

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(engine=Depends(get_engine)):
	report = await perform_health_check(engine)
	# Degraded still serves traffic
	code = 503 if report["status"] == HealthStatus.UNHEALTHY else 200
	return JSONResponse(status_code=code, content=jsonable_encoder(report))
