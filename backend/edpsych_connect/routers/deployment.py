from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..deployment.schemas import (
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
from ..deployment.service import DeploymentService
from .auth import User, get_current_user

router = APIRouter(prefix="/deployment", tags=["deployment"])

_service = DeploymentService()


def get_deployment_service() -> DeploymentService:
	return _service


def _found(value, detail: str):
	if value is None:
		raise HTTPException(status_code=404, detail=detail)
	return value


def _updated(ok: bool, detail: str) -> Dict[str, bool]:
	if not ok:
		raise HTTPException(status_code=404, detail=detail)
	return {"ok": True}


# ---- Documentation and deployments (static paths before /{environment}) ----

@router.get("/documentation", response_model=DeploymentDocumentation)
def documentation(service: DeploymentService = Depends(get_deployment_service)):
	return service.generate_deployment_documentation()


@router.get("/deployments", response_model=List[DeploymentStatus])
def list_deployments(service: DeploymentService = Depends(get_deployment_service)):
	return service.list_deployments()


@router.get("/deployments/{deployment_id}", response_model=DeploymentStatus)
def deployment_status(deployment_id: str, service: DeploymentService = Depends(get_deployment_service)):
	return _found(service.get_deployment_status(deployment_id), f"deployment not found: {deployment_id}")


@router.post("/deployments/{deployment_id}/rollback")
def rollback(
	deployment_id: str,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	if service.get_deployment_status(deployment_id) is None:
		raise HTTPException(status_code=404, detail=f"deployment not found: {deployment_id}")
	if not service.rollback_deployment(deployment_id):
		raise HTTPException(status_code=409, detail="deployment cannot be rolled back")
	return {"ok": True}


# ---- Singleton configs ----

def _singleton_routes(path: str, model, label: str, create, get, update) -> None:
	@router.put(f"/{path}", status_code=201, name=f"create_{path}")
	def _create(
		config: model,  # type: ignore[valid-type]
		user: User = Depends(get_current_user),
		service: DeploymentService = Depends(get_deployment_service),
	):
		return {"id": create(service, config)}

	@router.get(f"/{path}", response_model=model, name=f"get_{path}")
	def _get(service: DeploymentService = Depends(get_deployment_service)):
		return _found(get(service), f"{label} configuration not found")

	@router.patch(f"/{path}", name=f"update_{path}")
	def _update(
		updates: Dict[str, Any],
		user: User = Depends(get_current_user),
		service: DeploymentService = Depends(get_deployment_service),
	):
		if get(service) is None:
			raise HTTPException(status_code=404, detail=f"{label} configuration not found")
		if not update(service, updates):
			raise HTTPException(status_code=400, detail=f"invalid {label} configuration update")
		return {"ok": True}


_singleton_routes("cicd", CICDPipelineConfig, "CI/CD pipeline",
	DeploymentService.create_cicd_pipeline_config, DeploymentService.get_cicd_pipeline_config, DeploymentService.update_cicd_pipeline_config)
_singleton_routes("testing", TestingConfig, "testing",
	DeploymentService.create_testing_config, DeploymentService.get_testing_config, DeploymentService.update_testing_config)
_singleton_routes("database", DatabaseDeploymentConfig, "database deployment",
	DeploymentService.create_database_deployment_config, DeploymentService.get_database_deployment_config, DeploymentService.update_database_deployment_config)
_singleton_routes("monitoring", MonitoringConfig, "monitoring",
	DeploymentService.create_monitoring_config, DeploymentService.get_monitoring_config, DeploymentService.update_monitoring_config)
_singleton_routes("security", SecurityConfig, "security",
	DeploymentService.create_security_config, DeploymentService.get_security_config, DeploymentService.update_security_config)


# ---- DNS ----

@router.post("/dns", status_code=201)
def create_dns(
	config: DNSConfig,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	return {"id": service.create_dns_config(config)}


@router.get("/dns/{domain}", response_model=DNSConfig)
def get_dns(domain: str, service: DeploymentService = Depends(get_deployment_service)):
	return _found(service.get_dns_config(domain), f"DNS configuration not found for domain: {domain}")


@router.patch("/dns/{domain}")
def update_dns(
	domain: str,
	updates: Dict[str, Any],
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	_found(service.get_dns_config(domain), f"DNS configuration not found for domain: {domain}")
	if not service.update_dns_config(domain, updates):
		raise HTTPException(status_code=400, detail="invalid DNS configuration update")
	return {"ok": True}


@router.post("/dns/{domain}/records", status_code=201)
def add_dns_record(
	domain: str,
	record: DNSRecord,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	return _updated(service.add_dns_record(domain, record), f"DNS configuration not found for domain: {domain}")


@router.delete("/dns/{domain}/records/{name}")
def remove_dns_record(
	domain: str,
	name: str,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	return _updated(service.remove_dns_record(domain, name), f"DNS configuration not found for domain: {domain}")


# ---- Per-environment deployment configs ----

@router.post("", status_code=201)
def create_deployment_config(
	config: DeploymentConfig,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	return {"id": service.create_deployment_config(config)}


@router.get("/{environment}", response_model=DeploymentConfig)
def get_deployment_config(environment: DeploymentEnvironment, service: DeploymentService = Depends(get_deployment_service)):
	return _found(service.get_deployment_config(environment), f"Configuration not found for environment: {environment.value}")


@router.patch("/{environment}")
def update_deployment_config(
	environment: DeploymentEnvironment,
	updates: Dict[str, Any],
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	_found(service.get_deployment_config(environment), f"Configuration not found for environment: {environment.value}")
	if not service.update_deployment_config(environment, updates):
		raise HTTPException(status_code=400, detail="invalid deployment configuration update")
	return {"ok": True}


@router.put("/{environment}/variables")
def add_environment_variable(
	environment: DeploymentEnvironment,
	variable: EnvironmentVariable,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	return _updated(
		service.add_environment_variable(environment, variable),
		f"Configuration not found for environment: {environment.value}",
	)


@router.delete("/{environment}/variables/{key}")
def remove_environment_variable(
	environment: DeploymentEnvironment,
	key: str,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	return _updated(
		service.remove_environment_variable(environment, key),
		f"Configuration not found for environment: {environment.value}",
	)


@router.post("/{environment}/deploy", response_model=DeploymentResult)
def deploy(
	environment: DeploymentEnvironment,
	user: User = Depends(get_current_user),
	service: DeploymentService = Depends(get_deployment_service),
):
	result = service.deploy_to_environment(environment)
	if not result.success:
		raise HTTPException(status_code=404, detail=result.error)
	return result
