"""Tests for the health check endpoint and application wiring."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from src.config import get_settings
from src.main import app, settings


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(settings, "database_path", str(tmp_path / "users.db"))
    return TestClient(app)


def test_health_check_returns_healthy(client: TestClient) -> None:
    """Health endpoint should return healthy status."""
    with client:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == get_settings().app_version


def test_auth_routes_mounted(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Auth routes should answer through the full application."""
    monkeypatch.setattr(settings, "jwt_secret_key", None)

    with client:
        response = client.post("/auth/verify", json={"token": "abc"})

    # No JWT secret configured: service stays unset
    assert response.status_code == 503


def test_validation_errors_use_uniform_shape(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Bad bodies should get the auth error shape, not FastAPI's default 422."""
    monkeypatch.setattr(settings, "jwt_secret_key", SecretStr("test-secret-key-for-testing-only"))

    with client:
        response = client.post("/auth/verify", json={})

    assert response.status_code == 400
    assert response.json()["kind"] == "validation_failed"
