"""
In-memory registry for deployment, CI/CD, DNS, testing, database, monitoring
and security configuration, plus simulated deploy and rollback.

Lookups that miss are logged and reported as ``False``/``None`` rather than
raised, so HTTP handlers decide how to surface them.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..monitoring.log import log_event
from ..settings import settings
from .schemas import (
	CICDPipelineConfig,
	DatabaseDeploymentConfig,
	DeploymentConfig,
	DeploymentDocumentation,
	DeploymentEnvironment,
	DeploymentResult,
	DeploymentStatus,
	DNSConfig,
	DNSRecord,
	EnvironmentVariable,
	MonitoringConfig,
	SecurityConfig,
	TestingConfig,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Updates = Union[Mapping[str, Any], BaseModel]

CICD_PIPELINE_ID = "cicd-pipeline"
TESTING_CONFIG_ID = "testing-config"
DATABASE_CONFIG_ID = "database-deployment-config"
MONITORING_CONFIG_ID = "monitoring-config"
SECURITY_CONFIG_ID = "security-config"


def merge_updates(current: M, updates: Updates, *, locked: tuple[str, ...] = ()) -> M:
	"""Shallow-merge ``updates`` into ``current`` and re-validate.

	Keys may be field names or their camelCase aliases. Fields listed in
	``locked`` keep their current value.
	"""
	model_cls: Type[M] = type(current)
	if isinstance(updates, BaseModel):
		updates = updates.model_dump(exclude_unset=True)
	data = current.model_dump(by_alias=True)
	by_alias = {name: (field.alias or name) for name, field in model_cls.model_fields.items()}
	for key, value in updates.items():
		data[by_alias.get(key, key)] = value
	for name in locked:
		data[by_alias[name]] = getattr(current, name)
	return model_cls.model_validate(data)


def _as(model_cls: Type[M], value: Union[M, Mapping[str, Any]]) -> M:
	if isinstance(value, model_cls):
		return value.model_copy(deep=True)
	return model_cls.model_validate(value)


class DeploymentService:
	def __init__(self, base_domain: Optional[str] = None) -> None:
		self.base_domain = base_domain or settings.public_base_domain
		self._deployment_configs: Dict[DeploymentEnvironment, DeploymentConfig] = {}
		self._dns_configs: Dict[str, DNSConfig] = {}
		self._cicd_pipeline_config: Optional[CICDPipelineConfig] = None
		self._testing_config: Optional[TestingConfig] = None
		self._database_config: Optional[DatabaseDeploymentConfig] = None
		self._monitoring_config: Optional[MonitoringConfig] = None
		self._security_config: Optional[SecurityConfig] = None
		self._deployments: Dict[str, DeploymentStatus] = {}

	# ---- Deployment configs ----

	def create_deployment_config(self, config: Union[DeploymentConfig, Mapping[str, Any]]) -> str:
		config = _as(DeploymentConfig, config)
		# Variables are managed separately through add/remove_environment_variable
		config.environment_variables = []
		self._deployment_configs[config.environment] = config
		log_event(logger, logging.INFO, "Created deployment configuration", environment=config.environment.value)
		return config.environment.value

	def get_deployment_config(self, environment: DeploymentEnvironment) -> Optional[DeploymentConfig]:
		config = self._deployment_configs.get(DeploymentEnvironment(environment))
		return config.model_copy(deep=True) if config else None

	def update_deployment_config(self, environment: DeploymentEnvironment, updates: Updates) -> bool:
		environment = DeploymentEnvironment(environment)
		config = self._deployment_configs.get(environment)
		if config is None:
			logger.error("Configuration not found for environment: %s", environment.value)
			return False
		try:
			self._deployment_configs[environment] = merge_updates(config, updates, locked=("environment",))
		except ValidationError as e:
			logger.error("Rejected deployment configuration update for %s: %s", environment.value, e)
			return False
		log_event(logger, logging.INFO, "Updated deployment configuration", environment=environment.value)
		return True

	def add_environment_variable(
		self,
		environment: DeploymentEnvironment,
		variable: Union[EnvironmentVariable, Mapping[str, Any]],
	) -> bool:
		environment = DeploymentEnvironment(environment)
		config = self._deployment_configs.get(environment)
		if config is None:
			logger.error("Configuration not found for environment: %s", environment.value)
			return False
		variable = _as(EnvironmentVariable, variable)
		for i, existing in enumerate(config.environment_variables):
			if existing.key == variable.key:
				config.environment_variables[i] = variable
				break
		else:
			config.environment_variables.append(variable)
		# Never log secret values
		log_event(logger, logging.INFO, "Set environment variable", environment=environment.value, key=variable.key)
		return True

	def remove_environment_variable(self, environment: DeploymentEnvironment, key: str) -> bool:
		environment = DeploymentEnvironment(environment)
		config = self._deployment_configs.get(environment)
		if config is None:
			logger.error("Configuration not found for environment: %s", environment.value)
			return False
		config.environment_variables = [v for v in config.environment_variables if v.key != key]
		log_event(logger, logging.INFO, "Removed environment variable", environment=environment.value, key=key)
		return True

	# ---- Singleton configs ----

	def _update_singleton(self, attr: str, label: str, updates: Updates) -> bool:
		current = getattr(self, attr)
		if current is None:
			logger.error("%s configuration not found", label)
			return False
		try:
			setattr(self, attr, merge_updates(current, updates))
		except ValidationError as e:
			logger.error("Rejected %s configuration update: %s", label, e)
			return False
		log_event(logger, logging.INFO, "Updated configuration", kind=label)
		return True

	def create_cicd_pipeline_config(self, config: Union[CICDPipelineConfig, Mapping[str, Any]]) -> str:
		self._cicd_pipeline_config = _as(CICDPipelineConfig, config)
		log_event(logger, logging.INFO, "Created configuration", kind="CI/CD pipeline")
		return CICD_PIPELINE_ID

	def get_cicd_pipeline_config(self) -> Optional[CICDPipelineConfig]:
		return self._copy(self._cicd_pipeline_config)

	def update_cicd_pipeline_config(self, updates: Updates) -> bool:
		return self._update_singleton("_cicd_pipeline_config", "CI/CD pipeline", updates)

	def create_testing_config(self, config: Union[TestingConfig, Mapping[str, Any]]) -> str:
		self._testing_config = _as(TestingConfig, config)
		log_event(logger, logging.INFO, "Created configuration", kind="testing")
		return TESTING_CONFIG_ID

	def get_testing_config(self) -> Optional[TestingConfig]:
		return self._copy(self._testing_config)

	def update_testing_config(self, updates: Updates) -> bool:
		return self._update_singleton("_testing_config", "Testing", updates)

	def create_database_deployment_config(self, config: Union[DatabaseDeploymentConfig, Mapping[str, Any]]) -> str:
		self._database_config = _as(DatabaseDeploymentConfig, config)
		log_event(logger, logging.INFO, "Created configuration", kind="database deployment")
		return DATABASE_CONFIG_ID

	def get_database_deployment_config(self) -> Optional[DatabaseDeploymentConfig]:
		return self._copy(self._database_config)

	def update_database_deployment_config(self, updates: Updates) -> bool:
		return self._update_singleton("_database_config", "Database deployment", updates)

	def create_monitoring_config(self, config: Union[MonitoringConfig, Mapping[str, Any]]) -> str:
		self._monitoring_config = _as(MonitoringConfig, config)
		log_event(logger, logging.INFO, "Created configuration", kind="monitoring")
		return MONITORING_CONFIG_ID

	def get_monitoring_config(self) -> Optional[MonitoringConfig]:
		return self._copy(self._monitoring_config)

	def update_monitoring_config(self, updates: Updates) -> bool:
		return self._update_singleton("_monitoring_config", "Monitoring", updates)

	def create_security_config(self, config: Union[SecurityConfig, Mapping[str, Any]]) -> str:
		self._security_config = _as(SecurityConfig, config)
		log_event(logger, logging.INFO, "Created configuration", kind="security")
		return SECURITY_CONFIG_ID

	def get_security_config(self) -> Optional[SecurityConfig]:
		return self._copy(self._security_config)

	def update_security_config(self, updates: Updates) -> bool:
		return self._update_singleton("_security_config", "Security", updates)

	@staticmethod
	def _copy(config: Optional[M]) -> Optional[M]:
		return config.model_copy(deep=True) if config is not None else None

	# ---- DNS ----

	def create_dns_config(self, config: Union[DNSConfig, Mapping[str, Any]]) -> str:
		config = _as(DNSConfig, config)
		self._dns_configs[config.domain] = config
		log_event(logger, logging.INFO, "Created DNS configuration", domain=config.domain)
		return config.domain

	def get_dns_config(self, domain: str) -> Optional[DNSConfig]:
		return self._copy(self._dns_configs.get(domain))

	def update_dns_config(self, domain: str, updates: Updates) -> bool:
		config = self._dns_configs.get(domain)
		if config is None:
			logger.error("DNS configuration not found for domain: %s", domain)
			return False
		try:
			self._dns_configs[domain] = merge_updates(config, updates, locked=("domain",))
		except ValidationError as e:
			logger.error("Rejected DNS configuration update for %s: %s", domain, e)
			return False
		return True

	def add_dns_record(self, domain: str, record: Union[DNSRecord, Mapping[str, Any]]) -> bool:
		config = self._dns_configs.get(domain)
		if config is None:
			logger.error("DNS configuration not found for domain: %s", domain)
			return False
		record = _as(DNSRecord, record)
		config.records.append(record)
		log_event(logger, logging.INFO, "Added DNS record", domain=domain, name=record.name, type=record.type)
		return True

	def remove_dns_record(self, domain: str, record_name: str) -> bool:
		"""Remove every record named ``record_name`` (records carry no ids)."""
		config = self._dns_configs.get(domain)
		if config is None:
			logger.error("DNS configuration not found for domain: %s", domain)
			return False
		config.records = [r for r in config.records if r.name != record_name]
		return True

	# ---- Deployments ----

	def environment_url(self, environment: DeploymentEnvironment) -> str:
		if environment == DeploymentEnvironment.PRODUCTION:
			return f"https://{self.base_domain}"
		if environment == DeploymentEnvironment.STAGING:
			return f"https://staging.{self.base_domain}"
		return f"https://dev.{self.base_domain}"

	def deploy_to_environment(self, environment: DeploymentEnvironment) -> DeploymentResult:
		environment = DeploymentEnvironment(environment)
		if environment not in self._deployment_configs:
			error = f"Configuration not found for environment: {environment.value}"
			logger.error(error)
			return DeploymentResult(success=False, deployment_url="", logs="", error=error)
		# Simulated: no provider API is called
		deployment_id = uuid.uuid4().hex
		url = self.environment_url(environment)
		now = datetime.now(timezone.utc)
		self._deployments[deployment_id] = DeploymentStatus(
			deployment_id=deployment_id,
			environment=environment,
			status="ready",
			url=url,
			created_at=now,
			ready_at=now,
		)
		log_event(logger, logging.INFO, "Deployed", environment=environment.value, deployment_id=deployment_id)
		return DeploymentResult(success=True, deployment_url=url, logs="Deployment successful", deployment_id=deployment_id)

	def get_deployment_status(self, deployment_id: str) -> Optional[DeploymentStatus]:
		return self._copy(self._deployments.get(deployment_id))

	def list_deployments(self) -> List[DeploymentStatus]:
		return sorted(
			(d.model_copy() for d in self._deployments.values()),
			key=lambda d: d.created_at,
		)

	def rollback_deployment(self, deployment_id: str) -> bool:
		deployment = self._deployments.get(deployment_id)
		if deployment is None:
			logger.error("Deployment not found: %s", deployment_id)
			return False
		if deployment.status != "ready":
			logger.warning("Deployment %s cannot be rolled back from status %s", deployment_id, deployment.status)
			return False
		deployment.status = "rolled_back"
		log_event(logger, logging.WARNING, "Rolled back deployment", deployment_id=deployment_id)
		return True

	# ---- Documentation ----

	def generate_deployment_documentation(self) -> DeploymentDocumentation:
		return DeploymentDocumentation(
			setup_instructions=self._setup_section(),
			environment_variables=self._environment_variables_section(),
			cicd_configuration=self._cicd_section(),
			dns_configuration=self._dns_section(),
			security_configuration=self._security_section(),
			monitoring_configuration=self._monitoring_section(),
		)

	def _setup_section(self) -> str:
		lines = ["# Setup Instructions", ""]
		if not self._deployment_configs:
			lines.append("_No deployment environments configured._")
			return "\n".join(lines)
		for env in DeploymentEnvironment:
			config = self._deployment_configs.get(env)
			if config is None:
				continue
			lines += [
				f"## {env.value.capitalize()} ({config.provider.value})",
				f"- Project: {config.project_name}",
				f"- Repository: {config.git_repository.type}:{config.git_repository.repo}@{config.git_repository.branch}",
				f"- Node version: {config.node_version}",
				f"- Install: `{config.install_command}`",
				f"- Build: `{config.build_command}` (output `{config.output_directory}`)",
				f"- URL: {self.environment_url(env)}",
				"",
			]
		return "\n".join(lines).rstrip()

	def _environment_variables_section(self) -> str:
		lines = ["# Environment Variables", ""]
		any_vars = False
		for env in DeploymentEnvironment:
			config = self._deployment_configs.get(env)
			if config is None or not config.environment_variables:
				continue
			any_vars = True
			lines.append(f"## {env.value.capitalize()}")
			for var in config.environment_variables:
				shown = "(secret)" if var.is_secret else var.value
				suffix = f": {var.description}" if var.description else ""
				lines.append(f"- {var.key} = {shown}{suffix}")
			lines.append("")
		if not any_vars:
			lines.append("_No environment variables configured._")
		return "\n".join(lines).rstrip()

	def _cicd_section(self) -> str:
		lines = ["# CI/CD Configuration", ""]
		config = self._cicd_pipeline_config
		if config is None:
			lines.append("_CI/CD pipeline not configured._")
			return "\n".join(lines)
		lines.append(f"Provider: {config.provider} (timeout {config.timeout} min, concurrency {config.concurrency})")
		for title, steps in (("Build", config.build_steps), ("Test", config.test_steps), ("Deploy", config.deploy_steps)):
			lines.append(f"## {title} steps")
			lines += [f"- {s.name}: `{s.command}`" for s in steps] or ["- none"]
		return "\n".join(lines)

	def _dns_section(self) -> str:
		lines = ["# DNS Configuration", ""]
		if not self._dns_configs:
			lines.append("_No DNS configuration._")
			return "\n".join(lines)
		for domain, config in sorted(self._dns_configs.items()):
			lines.append(f"## {domain} ({config.provider})")
			for r in config.records:
				lines.append(f"- {r.type} Record: {r.name} -> {r.value} (ttl {r.ttl})")
			lines.append("")
		return "\n".join(lines).rstrip()

	def _security_section(self) -> str:
		lines = ["# Security Configuration", ""]
		config = self._security_config
		if config is None:
			lines.append("_Security not configured._")
			return "\n".join(lines)
		h = config.headers
		lines += [
			"## Headers",
			f"- X-Frame-Options: {h.x_frame_options}",
			f"- X-Content-Type-Options: {h.x_content_type_options}",
			f"- Referrer-Policy: {h.referrer_policy}",
			f"- Strict-Transport-Security: max-age={h.strict_transport_security.max_age}",
			"## CORS",
			f"- Origins: {', '.join(config.cors.origins)}",
			"## Rate limiting",
			f"- {config.rate_limit.max_requests} requests per {config.rate_limit.window_ms} ms"
			if config.rate_limit.enabled else "- disabled",
			"## Authentication",
			f"- Providers: {', '.join(config.authentication.providers)}",
		]
		return "\n".join(lines)

	def _monitoring_section(self) -> str:
		lines = ["# Monitoring Configuration", ""]
		config = self._monitoring_config
		if config is None:
			lines.append("_Monitoring not configured._")
			return "\n".join(lines)
		lines += [
			f"Provider: {config.provider}",
			f"- Error tracking: {'enabled' if config.error_tracking.enabled else 'disabled'}",
			f"- Performance sample rate: {config.performance_monitoring.sample_rate}",
			f"- Log level: {config.log_management.level} (retention {config.log_management.retention} days)",
			f"- Alert rules: {len(config.alerting.rules)}",
			f"- Uptime endpoints: {', '.join(config.uptime.endpoints)}",
		]
		return "\n".join(lines)
