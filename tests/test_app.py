"""Tests for app wiring: root, health, error envelopes, startup"""
import pytest
from fastapi.testclient import TestClient

from storefront.config import settings
from storefront.errors import ConfigurationError
from storefront.main import app


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["endpoints"]["products"] == "/api/products"


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_health_ready(client: TestClient):
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True
    assert data["checks"]["revoked_tokens"] == 0


def test_unknown_route_uses_envelope(client: TestClient):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found"}


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req_test"})
    assert response.headers["X-Request-ID"] == "req_test"
    assert "X-Response-Time" in response.headers


def test_metrics_endpoint(client: TestClient):
    client.get("/api/auth/profile")
    response = client.get(settings.METRICS_PATH)
    assert response.status_code == 200
    assert "storefront_authentication_failures_total" in response.text


def test_startup_fails_without_signing_secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", None)

    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass

