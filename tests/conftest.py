"""
Pytest configuration: an isolated app per test with its own data dir,
public dir and SQLite file, plus a mailer that records instead of sending.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "portfolio_cms_test.log"))

from fastapi.testclient import TestClient  # noqa: E402

from config import Config  # noqa: E402
from errors import UpstreamFailure  # noqa: E402
from main import create_app  # noqa: E402


class FakeMailer:
    """Collects outgoing mail; set ``fail`` to simulate an SMTP outage."""

    def __init__(self):
        self.outbox = []
        self.fail = False

    def send(self, to, subject, html_body):
        if self.fail:
            raise UpstreamFailure()
        self.outbox.append({"to": to, "subject": subject, "html": html_body})


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        DATA_DIR=str(tmp_path / "data"),
        PUBLIC_DIR=str(tmp_path / "public"),
        PUBLIC_BASE_URL="http://portfolio.test",
        JWT_SECRET_KEY="test-secret",
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="admin123",
        ADMIN_EMAIL="admin@example.com",
        NOTIFY_EMAIL="owner@example.com",
        SCHEDULER_ENABLED=False,
    )


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def app(config, mailer):
    return create_app(config, mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def resources(app):
    return app.state.resources


@pytest.fixture
def db_session(client, app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers(client):
    response = client.post("/api/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
