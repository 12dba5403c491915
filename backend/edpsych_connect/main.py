import asyncio
import logging

from fastapi import FastAPI

from .db import Base, engine, SessionLocal, ensure_schema
from .cleanup import purge_expired_alert_events
from .monitoring.log import configure_logging
from .settings import settings
from .routers import health
from .routers import auth
from .routers import deployment
from .routers import alerts
from .routers import learning

logger = logging.getLogger(__name__)

app = FastAPI(title="EdPsych Connect API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(deployment.router)
app.include_router(alerts.router)
app.include_router(learning.router)


@app.get("/info")
def root():
	return {"status": "ok", "environment": settings.environment}


def _purge_alert_events() -> None:
	db = SessionLocal()
	try:
		removed = purge_expired_alert_events(db, settings.alert_event_retention_days)
		if removed:
			logger.info("Purged %d expired alert events", removed)
	except Exception:
		logger.exception("Alert event cleanup failed")
	finally:
		db.close()


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(24 * 60 * 60)
		_purge_alert_events()


@app.on_event("startup")
async def startup_event():
	configure_logging(settings.log_level)
	Base.metadata.create_all(bind=engine)
	# Apply lightweight dev migrations
	try:
		ensure_schema()
	except Exception:
		logger.exception("Schema migration failed")
	_purge_alert_events()
	asyncio.create_task(_cleanup_watcher())
	logger.info("EdPsych Connect API started (%s)", settings.environment)
