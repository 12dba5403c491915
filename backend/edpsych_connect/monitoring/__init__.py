from .alerting import AlertChannel, AlertConfig, AlertRegistry, AlertState
from .health_checks import HealthStatus, overall_status, perform_health_check
from .log import configure_logging, log_event
