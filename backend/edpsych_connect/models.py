from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, String, DateTime, Float, Integer, Text, UniqueConstraint
from .db import Base


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Primary key is username
	username = Column(String(128), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	email = Column(String(256), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# jti claim of the issued token
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), index=True, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class LearningStyleAssessment(Base):
	__tablename__ = "learning_style_assessments"
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(128), index=True, nullable=False)
	visual = Column(Integer, nullable=False)
	auditory = Column(Integer, nullable=False)
	reading_writing = Column(Integer, nullable=False)
	kinesthetic = Column(Integer, nullable=False)
	primary_style = Column(String(32), nullable=False)
	secondary_style = Column(String(32), nullable=True)
	is_multimodal = Column(Boolean, default=False, nullable=False)
	answers_json = Column(Text, nullable=False)  # JSON string snapshot
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ModuleProgressRecord(Base):
	__tablename__ = "module_progress"
	__table_args__ = (UniqueConstraint("user_id", "module_id", name="uq_module_progress_user_module"),)
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(128), index=True, nullable=False)
	module_id = Column(String(64), nullable=False)
	status = Column(String(32), nullable=False)
	progress_json = Column(Text, nullable=False)  # JSON string snapshot
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AlertEvent(Base):
	__tablename__ = "alert_events"
	id = Column(Integer, primary_key=True, autoincrement=True)
	alert_name = Column(String(128), index=True, nullable=False)
	# "fired" or "resolved"
	kind = Column(String(16), nullable=False)
	severity = Column(String(16), default="warning", nullable=False)
	value = Column(Float, nullable=False)
	threshold = Column(Float, nullable=False)
	context_json = Column(Text, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
