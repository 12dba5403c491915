import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from edpsych_connect import models  # noqa: F401  (registers tables)
from edpsych_connect.db import Base, get_db, get_engine
from edpsych_connect.deployment.service import DeploymentService
from edpsych_connect.main import app
from edpsych_connect.monitoring.alerting import AlertRegistry
from edpsych_connect.routers.alerts import get_alert_registry
from edpsych_connect.routers.auth import User, get_current_user
from edpsych_connect.routers.deployment import get_deployment_service


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def deployment_service():
    return DeploymentService(base_domain="edpsychconnect.com")


@pytest.fixture
def alert_registry(session_factory):
    return AlertRegistry(session_factory=session_factory)


@pytest.fixture
def client(engine, session_factory, deployment_service, alert_registry):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_current_user] = lambda: User(username="operator")
    app.dependency_overrides[get_deployment_service] = lambda: deployment_service
    app.dependency_overrides[get_alert_registry] = lambda: alert_registry
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def production_config():
    return {
        "environment": "production",
        "provider": "vercel",
        "projectName": "edpsych-connect",
        "gitRepository": {"repo": "edpsych/edpsych-connect"},
    }
