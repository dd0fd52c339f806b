import pytest

from oidc_login import create_app, db
from oidc_login.config import Config
from oidc_login.lti.notify import AdminNotifier
from oidc_login.lti.repository import DeploymentRepository
from oidc_login.models import Deployment


class TestingConfig(Config):
    TESTING = True
    LTI_STATE_SECRET = "test-state-secret"
    TOOL_ISSUER = "https://tool.example.com"
    SENDGRID_API_KEY = None
    APP_ENV = "production"
    REGISTRATION_URL = "https://www.chemvantage.org/lti/registration"


class HostIssuerConfig(TestingConfig):
    TOOL_ISSUER = None


class RecordingNotifier(AdminNotifier):
    def __init__(self):
        self.sent = []

    def send(self, subject, message):
        self.sent.append((subject, message))


class InMemoryDeploymentRepository(DeploymentRepository):
    def __init__(self, *deployments):
        self.records = {d.platform_deployment_id: d for d in deployments}
        self.puts = 0

    def get_exact(self, key):
        return self.records.get(key)

    def scan_range(self, start, end):
        return [self.records[k] for k in sorted(self.records) if start <= k < end]

    def put(self, deployment):
        self.puts += 1
        self.records[deployment.platform_deployment_id] = deployment
        return deployment


def make_deployment(platform_id="https://lms.example.com", deployment_id="d1", client_id="client123"):
    return Deployment.create(
        platform_id,
        deployment_id,
        client_id,
        f"{platform_id}/auth",
        f"{platform_id}/token",
        f"{platform_id}/jwks",
        contact_name="Pat Admin",
        email="pat@example.com",
        organization="Example U",
        org_url="https://example.edu",
        lms="moodle",
    )


@pytest.fixture()
def notifier():
    return RecordingNotifier()


def _app(config_class, notifier):
    app = create_app(config_class, notifier=notifier)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app(notifier):
    yield from _app(TestingConfig, notifier)


@pytest.fixture()
def host_issuer_app(notifier):
    """App without TOOL_ISSUER, so the state issuer comes from the request host."""
    yield from _app(HostIssuerConfig, notifier)


@pytest.fixture()
def client(app):
    return app.test_client()
