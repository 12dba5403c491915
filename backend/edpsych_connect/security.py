"""
Operator credentials and JWT-backed sessions.

Every issued token carries a ``jti`` that names a row in ``auth_sessions``;
deleting the row revokes the token before it expires.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .models import AuthSession, AuthUser
from .settings import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt ignores anything past 72 bytes and newer backends reject it outright
BCRYPT_MAX_BYTES = 72


class InvalidSession(Exception):
	pass


def _clip(password: str) -> str:
	return password.encode("utf-8")[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
	return pwd_context.hash(_clip(password))


def verify_password(password: str, password_hash: str) -> bool:
	return pwd_context.verify(_clip(password), password_hash)


def check_operator_credentials(db: Session, username: str, password: str) -> bool:
	row = db.get(AuthUser, username)
	if row is not None:
		return verify_password(password, row.password_hash)
	# Bootstrap operator from the environment, only when no account row exists
	if settings.seed_username and settings.seed_password_plain and username == settings.seed_username:
		return password == settings.seed_password_plain
	return False


def create_operator(db: Session, username: str, password: str, email: str) -> AuthUser:
	row = AuthUser(username=username, password_hash=hash_password(password), email=email)
	db.add(row)
	db.commit()
	return row


def token_lifetime() -> timedelta:
	minutes = settings.access_token_expire_minutes
	return timedelta(minutes=minutes) if minutes > 0 else timedelta(days=1)


def open_session(db: Session, username: str, lifetime: Optional[timedelta] = None) -> str:
	"""Persist a new session row and return the signed token for it."""
	session_id = uuid.uuid4().hex
	db.add(AuthSession(session_id=session_id, username=username))
	db.commit()
	claims = {
		"sub": username,
		"jti": session_id,
		"exp": datetime.now(timezone.utc) + (lifetime or token_lifetime()),
	}
	return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode(token: str) -> tuple[str, str]:
	try:
		claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError as e:
		raise InvalidSession(str(e)) from e
	username, session_id = claims.get("sub"), claims.get("jti")
	if not username or not session_id:
		raise InvalidSession("token is missing sub or jti")
	return username, session_id


def resolve_session(db: Session, token: str) -> str:
	"""Return the operator behind ``token`` and mark the session as active."""
	username, session_id = _decode(token)
	row = db.get(AuthSession, session_id)
	if row is None or row.username != username:
		raise InvalidSession("session revoked")
	now = datetime.utcnow()
	idle = settings.session_idle_minutes
	if idle > 0 and now - row.last_activity_at > timedelta(minutes=idle):
		db.delete(row)
		db.commit()
		raise InvalidSession("session idle too long")
	row.last_activity_at = now
	db.commit()
	return username


def close_session(db: Session, token: str) -> bool:
	_, session_id = _decode(token)
	row = db.get(AuthSession, session_id)
	if row is None:
		return False
	db.delete(row)
	db.commit()
	return True
