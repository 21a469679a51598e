"""Smoke tests for the application wiring in agricart.main."""
from fastapi.testclient import TestClient


def test_health_reports_backends():
    from agricart.main import app

    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "online"
    assert data["persistence"] == "json"
    assert data["attempt_store"] == "memory"
    assert data["attempt_store_ok"] is True


def test_routers_mounted():
    from agricart.main import app

    paths = TestClient(app).get("/openapi.json").json()["paths"]
    assert "/api/auth/member/login" in paths
    assert "/api/lockout/{user_type}/check" in paths
