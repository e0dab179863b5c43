"""Health check and caller-identity tests."""

from fastapi.testclient import TestClient

from main import app


def test_health_check(client):
    """The health endpoint needs no caller identity."""
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_user_header_is_unauthorized(client):
    response = TestClient(app).get("/api/accounts")
    assert response.status_code == 401


def test_blank_user_header_is_unauthorized(client):
    response = TestClient(app, headers={"X-User-Id": "  "}).get("/api/budgets")
    assert response.status_code == 401
