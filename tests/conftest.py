"""Pytest configuration - temp SQLite database, fake mailer, mocked review API & FastAPI TestClient."""

import os
from unittest.mock import MagicMock

# Override env BEFORE importing app modules so Settings picks up test values.
os.environ.update(
    {
        "WEXTRACTOR_API_KEY": "test-api-key",
        "APP_ENV": "test",
        "DATABASE_URL": "",
        "EMAIL_USER": "",
        "EMAIL_PASS": "",
        "NOTIFICATION_EMAIL": "",
        "STATIC_DIR": "tests/__no_static__",
    }
)

import pytest  # noqa: E402
import requests  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rufheld.infrastructure.config import (  # noqa: E402
    DatabaseSettings,
    EmailSettings,
    ReviewApiSettings,
    Settings,
)
from rufheld.web.app import create_app  # noqa: E402
from rufheld.web.services import build_services  # noqa: E402

from factories import FakeMailer, make_response, make_upstream_page  # noqa: E402


# ── Fixtures ───────────────────────────────────────────────────────

@pytest.fixture()
def db_path(tmp_path) -> str:
    return str(tmp_path / "orders.db")


@pytest.fixture()
def settings(db_path, tmp_path) -> Settings:
    """Test settings with storage enabled and an admin notification address."""
    return Settings(
        review_api=ReviewApiSettings(api_key="test-api-key"),
        database=DatabaseSettings(url=db_path),
        email=EmailSettings(user="", password="", notification_email="admin@rufheld.de"),
        environment="test",
        static_dir=tmp_path / "public",
    )


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def session() -> MagicMock:
    """Mocked requests.Session for the review API."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.get.return_value = make_response(200, make_upstream_page(10))
    return mock_session


@pytest.fixture()
def services(settings, session, mailer):
    return build_services(settings, session=session, mailer=mailer)


@pytest.fixture()
def client(services):
    """FastAPI TestClient wired to the test services."""
    app = create_app(services=services)
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc


@pytest.fixture()
def storage_disabled_services(settings, session, mailer):
    no_db = Settings(
        review_api=settings.review_api,
        database=DatabaseSettings(url=""),
        email=settings.email,
        environment=settings.environment,
        static_dir=settings.static_dir,
    )
    return build_services(no_db, session=session, mailer=mailer)


@pytest.fixture()
def storage_disabled_client(storage_disabled_services):
    app = create_app(services=storage_disabled_services)
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc
