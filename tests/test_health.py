"""Health endpoint tests."""

from unittest.mock import patch

from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient) -> None:
    """GET /health returns 200 with status ok when the database answers."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


def test_health_returns_503_when_db_down(client: TestClient) -> None:
    """GET /health returns 503 when the database is unreachable."""
    with patch("app.main.engine") as mock_engine:
        mock_engine.connect.side_effect = Exception("connection refused")
        response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
