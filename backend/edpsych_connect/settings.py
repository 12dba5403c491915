from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Deployment environment name: development, staging or production
	environment: str = Field(default="development", validation_alias="APP_ENV")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Error tracking (only reported in health output; no SDK is wired here)
	sentry_dsn: str | None = Field(default=None, validation_alias="SENTRY_DSN")

	# Base domain used to build simulated deployment URLs
	public_base_domain: str = Field(default="edpsychconnect.com", validation_alias="PUBLIC_BASE_DOMAIN")

	# Health check thresholds (percent of system memory in use)
	memory_degraded_percent: float = Field(default=75.0, validation_alias="HEALTH_MEMORY_DEGRADED_PERCENT")
	memory_unhealthy_percent: float = Field(default=90.0, validation_alias="HEALTH_MEMORY_UNHEALTHY_PERCENT")

	# Alerting
	alert_default_cooldown_seconds: float = Field(default=300.0, validation_alias="ALERT_DEFAULT_COOLDOWN_SECONDS")
	alert_webhook_timeout_seconds: float = Field(default=5.0, validation_alias="ALERT_WEBHOOK_TIMEOUT_SECONDS")
	alert_event_retention_days: int = Field(default=30, validation_alias="ALERT_EVENT_RETENTION_DAYS")

	# Auth configuration for operator accounts
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# 0 disables the inactivity check
	session_idle_minutes: int = Field(default=0, validation_alias="SESSION_IDLE_MINUTES")
	# Seed operator
	seed_username: str | None = Field(default=None, validation_alias="SEED_USERNAME")
	seed_password_plain: str | None = Field(default=None, validation_alias="SEED_PASSWORD")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
