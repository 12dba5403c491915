"""
Deployment configuration models.

Every model accepts both snake_case field names and the camelCase keys used
by the web client, and serializes with camelCase aliases.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeploymentEnvironment(str, Enum):
	DEVELOPMENT = "development"
	STAGING = "staging"
	PRODUCTION = "production"


class DeploymentProvider(str, Enum):
	VERCEL = "vercel"
	NETLIFY = "netlify"
	AWS = "aws"
	AZURE = "azure"
	CUSTOM = "custom"


class ConfigModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Deployment ----

class EnvironmentVariable(ConfigModel):
	key: str
	value: str
	is_secret: bool = False
	description: Optional[str] = None


class Redirect(ConfigModel):
	source: str
	destination: str
	permanent: bool = False


class HeaderValue(ConfigModel):
	key: str
	value: str


class HeaderRule(ConfigModel):
	source: str
	headers: List[HeaderValue]


class GitRepository(ConfigModel):
	type: Literal["github", "gitlab", "bitbucket"] = "github"
	repo: str
	branch: str = "main"


class DeploymentConfig(ConfigModel):
	environment: DeploymentEnvironment
	provider: DeploymentProvider
	project_name: str
	team_id: Optional[str] = None
	framework: Literal["nextjs", "react", "vue", "angular", "svelte"] = "nextjs"
	root_directory: str = "./"
	build_command: str = "npm run build"
	output_directory: str = ".next"
	install_command: str = "npm install"
	dev_command: str = "npm run dev"
	node_version: str = "18.x"
	environment_variables: List[EnvironmentVariable] = Field(default_factory=list)
	domains: List[str] = Field(default_factory=list)
	regions: List[str] = Field(default_factory=lambda: ["iad1"])
	serverless_functions: bool = True
	automatic_deployments: bool = True
	pull_request_previews_enabled: bool = True
	cache_control: Dict[str, str] = Field(default_factory=dict)
	redirects: List[Redirect] = Field(default_factory=list)
	headers: List[HeaderRule] = Field(default_factory=list)
	ignore_command: Optional[str] = None
	git_repository: GitRepository


# ---- CI/CD ----

class PipelineStep(ConfigModel):
	name: str
	command: str
	condition: Optional[str] = None


class DeployStep(PipelineStep):
	environment: DeploymentEnvironment


class PipelineNotification(ConfigModel):
	type: Literal["email", "slack", "discord", "webhook"]
	target: str
	events: List[Literal["success", "failure", "started"]]
	condition: Optional[str] = None


class PipelineSchedule(ConfigModel):
	cron: str
	branches: List[str]
	steps: List[str]


class PipelineCaching(ConfigModel):
	enabled: bool = True
	paths: List[str] = Field(default_factory=lambda: ["node_modules"])
	key: Optional[str] = None


class CICDPipelineConfig(ConfigModel):
	provider: Literal["github-actions", "gitlab-ci", "jenkins", "circle-ci", "travis-ci"] = "github-actions"
	build_steps: List[PipelineStep]
	test_steps: List[PipelineStep]
	deploy_steps: List[DeployStep]
	notifications: List[PipelineNotification] = Field(default_factory=list)
	schedules: List[PipelineSchedule] = Field(default_factory=list)
	caching: PipelineCaching = Field(default_factory=PipelineCaching)
	timeout: int = Field(default=60, gt=0)
	concurrency: int = Field(default=1, gt=0)


# ---- Testing ----

class CoverageConfig(ConfigModel):
	enabled: bool = True
	threshold: float = Field(default=80, ge=0, le=100)
	exclude_paths: List[str] = Field(default_factory=list)


class UnitTestConfig(ConfigModel):
	framework: Literal["jest", "mocha", "vitest"] = "jest"
	directory: str = "__tests__"
	command: str = "npm run test"
	coverage: CoverageConfig = Field(default_factory=CoverageConfig)


class IntegrationTestConfig(ConfigModel):
	framework: Literal["cypress", "playwright", "selenium"] = "playwright"
	directory: str = "e2e"
	command: str = "npm run test:e2e"
	browsers: List[Literal["chromium", "firefox", "webkit"]] = Field(default_factory=lambda: ["chromium"])
	base_url: str = "http://localhost:3000"


class AccessibilityTestConfig(ConfigModel):
	enabled: bool = True
	standard: Literal["wcag2a", "wcag2aa", "wcag2aaa"] = "wcag2aa"
	tool: Literal["axe", "pa11y", "lighthouse"] = "axe"
	command: str = "npm run test:a11y"


class PerformanceThresholds(ConfigModel):
	performance: float = Field(default=90, ge=0, le=100)
	accessibility: float = Field(default=90, ge=0, le=100)
	best_practices: float = Field(default=90, ge=0, le=100)
	seo: float = Field(default=90, ge=0, le=100)


class PerformanceTestConfig(ConfigModel):
	enabled: bool = True
	tool: Literal["lighthouse", "webpagetest", "custom"] = "lighthouse"
	command: str = "npm run test:performance"
	thresholds: PerformanceThresholds = Field(default_factory=PerformanceThresholds)


class VisualRegressionTestConfig(ConfigModel):
	enabled: bool = False
	tool: Literal["percy", "chromatic", "loki", "custom"] = "percy"
	command: str = "npm run test:visual"


class MockService(ConfigModel):
	name: str
	port: int = Field(gt=0)
	command: str


class TestingConfig(ConfigModel):
	__test__ = False

	unit_tests: UnitTestConfig
	integration_tests: IntegrationTestConfig
	accessibility_tests: AccessibilityTestConfig
	performance_tests: PerformanceTestConfig
	visual_regression_tests: VisualRegressionTestConfig = Field(default_factory=VisualRegressionTestConfig)
	mock_services: List[MockService] = Field(default_factory=list)


# ---- Database ----

class MigrationConfig(ConfigModel):
	directory: str = "migrations"
	command: str = "npm run migrate"
	automatic_on_deploy: bool = False


class SeedingConfig(ConfigModel):
	directory: str = "seeds"
	command: str = "npm run seed"
	environments: List[DeploymentEnvironment] = Field(
		default_factory=lambda: [DeploymentEnvironment.DEVELOPMENT, DeploymentEnvironment.STAGING]
	)


class BackupConfig(ConfigModel):
	enabled: bool = True
	schedule: str = "0 0 * * *"
	retention_period: int = Field(default=30, gt=0)


class DatabaseDeploymentConfig(ConfigModel):
	type: Literal["postgres", "mysql", "mongodb", "sqlite", "none"] = "none"
	provider: Literal["vercel", "aws", "azure", "gcp", "custom"] = "vercel"
	connection_string: Optional[str] = None
	migrations: MigrationConfig = Field(default_factory=MigrationConfig)
	seeding: SeedingConfig = Field(default_factory=SeedingConfig)
	backup: BackupConfig = Field(default_factory=BackupConfig)


# ---- DNS ----

DNSRecordType = Literal["A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV", "CAA"]


class DNSRecord(ConfigModel):
	type: DNSRecordType
	name: str
	value: str
	ttl: int = Field(default=3600, gt=0)
	priority: Optional[int] = Field(default=None, ge=0)


class DomainVerification(ConfigModel):
	type: Literal["txt", "file"] = "txt"
	value: Optional[str] = None


class DNSConfig(ConfigModel):
	domain: str
	provider: Literal["vercel", "cloudflare", "route53", "custom"] = "vercel"
	records: List[DNSRecord]
	nameservers: Optional[List[str]] = None
	custom_domain_verification: DomainVerification = Field(default_factory=DomainVerification)


# ---- Monitoring ----

class ErrorTrackingConfig(ConfigModel):
	enabled: bool = True
	dsn: Optional[str] = None
	environment: DeploymentEnvironment


class PerformanceMonitoringConfig(ConfigModel):
	enabled: bool = True
	sample_rate: float = Field(default=0.1, ge=0, le=1)


class LogManagementConfig(ConfigModel):
	enabled: bool = True
	level: Literal["debug", "info", "warn", "error"] = "info"
	retention: int = Field(default=30, gt=0)


class AlertingChannelConfig(ConfigModel):
	type: Literal["email", "slack", "webhook"]
	target: str


class AlertingRuleConfig(ConfigModel):
	name: str
	condition: str
	channels: Optional[List[str]] = None


class AlertingConfig(ConfigModel):
	enabled: bool = True
	channels: List[AlertingChannelConfig] = Field(default_factory=list)
	rules: List[AlertingRuleConfig] = Field(default_factory=list)


class UptimeConfig(ConfigModel):
	enabled: bool = True
	check_interval: int = Field(default=60, gt=0)
	endpoints: List[str] = Field(default_factory=lambda: ["/api/health"])


class MonitoringConfig(ConfigModel):
	enabled: bool = True
	provider: Literal["vercel", "datadog", "newrelic", "sentry", "custom"] = "vercel"
	error_tracking: ErrorTrackingConfig
	performance_monitoring: PerformanceMonitoringConfig = Field(default_factory=PerformanceMonitoringConfig)
	log_management: LogManagementConfig = Field(default_factory=LogManagementConfig)
	alerting: AlertingConfig = Field(default_factory=AlertingConfig)
	uptime: UptimeConfig = Field(default_factory=UptimeConfig)


# ---- Security ----

class StrictTransportSecurity(ConfigModel):
	max_age: int = Field(default=63072000, gt=0)
	include_sub_domains: bool = True
	preload: bool = True


ReferrerPolicy = Literal[
	"no-referrer",
	"no-referrer-when-downgrade",
	"origin",
	"origin-when-cross-origin",
	"same-origin",
	"strict-origin",
	"strict-origin-when-cross-origin",
	"unsafe-url",
]

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]


class SecurityHeaders(ConfigModel):
	content_security_policy: Optional[str] = None
	x_frame_options: Literal["DENY", "SAMEORIGIN"] = "DENY"
	x_content_type_options: Literal["nosniff"] = "nosniff"
	referrer_policy: ReferrerPolicy = "strict-origin-when-cross-origin"
	permissions_policy: Optional[str] = None
	strict_transport_security: StrictTransportSecurity = Field(default_factory=StrictTransportSecurity)


class CorsConfig(ConfigModel):
	enabled: bool = True
	origins: List[str] = Field(default_factory=lambda: ["*"])
	methods: List[HttpMethod] = Field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
	allowed_headers: List[str] = Field(default_factory=lambda: ["Content-Type", "Authorization"])
	exposed_headers: List[str] = Field(default_factory=list)
	credentials: bool = True
	max_age: int = Field(default=86400, ge=0)


class RateLimitConfig(ConfigModel):
	enabled: bool = True
	max_requests: int = Field(default=100, gt=0)
	window_ms: int = Field(default=60000, gt=0)
	message: str = "Too many requests, please try again later."
	skip_successful_requests: bool = False
	skip_failed_requests: bool = False


class AuthenticationConfig(ConfigModel):
	providers: List[Literal["credentials", "google", "github", "facebook", "twitter", "apple", "custom"]] = Field(
		default_factory=lambda: ["credentials"]
	)
	session_duration: int = Field(default=86400, gt=0)
	jwt_secret: Optional[str] = None
	cookie_secure: bool = True
	cookie_same_site: Literal["strict", "lax", "none"] = "lax"


class SecurityConfig(ConfigModel):
	headers: SecurityHeaders
	cors: CorsConfig
	rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
	authentication: AuthenticationConfig


# ---- Results ----

class DeploymentResult(ConfigModel):
	success: bool
	deployment_url: str
	logs: str
	error: Optional[str] = None
	deployment_id: Optional[str] = None


DeploymentState = Literal["queued", "building", "ready", "error", "rolled_back"]


class DeploymentStatus(ConfigModel):
	deployment_id: str
	environment: DeploymentEnvironment
	status: DeploymentState
	url: str
	created_at: datetime
	ready_at: Optional[datetime] = None
	error: Optional[str] = None


class DeploymentDocumentation(ConfigModel):
	setup_instructions: str
	environment_variables: str
	cicd_configuration: str
	dns_configuration: str
	security_configuration: str
	monitoring_configuration: str
