from __future__ import annotations
from datetime import datetime, timedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import AlertEvent


def purge_expired_alert_events(db: Session, retention_days: int) -> int:
	threshold = datetime.utcnow() - timedelta(days=retention_days)
	res = db.execute(delete(AlertEvent).where(AlertEvent.created_at < threshold))
	db.commit()
	return res.rowcount or 0
