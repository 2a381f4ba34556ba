"""Shared fixtures for the pizza service tests.

Each test gets a fresh SQLite database file under ``tmp_path`` and a freshly
built application; cached settings and services are reset around it.
"""
import uuid

import pytest
from fastapi.testclient import TestClient

from pizza_service.core.config import get_settings
from pizza_service.services.denylist import reset_token_denylist
from pizza_service.services.factory import reset_factory_service

SECRET = "testing_secret"
FACTORY_KEY = "testing_factory_key"
ADMIN_EMAIL = "a@jwt.com"
ADMIN_PASSWORD = "admin"


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def _reset_caches():
    get_settings.cache_clear()
    reset_factory_service()
    reset_token_denylist()


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("ENV_MODE", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'pizza.db'}")
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("FACTORY_API_KEY", FACTORY_KEY)
    monkeypatch.setenv("FACTORY_URL", "https://factory.jwt.com")
    monkeypatch.setenv("TOKEN_DENYLIST_BACKEND", "database")
    monkeypatch.setenv("MOCK_FACTORY_FAILURE_RATE", "0")
    monkeypatch.setenv("DEFAULT_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("DEFAULT_ADMIN_PASSWORD", ADMIN_PASSWORD)
    _reset_caches()
    yield get_settings()
    _reset_caches()


@pytest.fixture
def client(settings):
    from pizza_service.main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(client):
    res = client.put("/api/auth", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return res.json()["token"]


@pytest.fixture
def register(client):
    """Register a diner and return ``{"user", "token", "password"}``."""

    def _register(name="pizza diner", email=None, password="diner"):
        email = email or f"{uuid.uuid4().hex[:10]}@jwt.com"
        res = client.post("/api/auth", json={"name": name, "email": email, "password": password})
        assert res.status_code == 200, res.text
        return {**res.json(), "password": password}

    return _register


@pytest.fixture
def create_franchise(client, admin_token):
    """Create a franchise administered by the given emails; returns the response body."""

    def _create(name=None, admin_emails=(ADMIN_EMAIL,)):
        name = name or f"pizza-{uuid.uuid4().hex[:8]}"
        res = client.post(
            "/api/franchise",
            json={"name": name, "admins": [{"email": email} for email in admin_emails]},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200, res.text
        return res.json()

    return _create
