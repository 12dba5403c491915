from .schemas import DeploymentEnvironment, DeploymentProvider
from .service import DeploymentService
