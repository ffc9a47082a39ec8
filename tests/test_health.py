from unittest.mock import MagicMock

from app.main import app


def test_health_reports_table_status(client):
    db = MagicMock()
    db.table_status.return_value = {
        "users": {"name": "pennywise-users", "status": "accessible"},
        "expenses": {"name": "pennywise-expenses", "status": "error", "error": "ResourceNotFoundException"},
    }
    app.state.db = db
    try:
        response = client.get("/api/v1/health")
    finally:
        del app.state.db
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "degraded"
    assert body["dynamodb"]["tables"]["users"]["status"] == "accessible"


def test_health_without_database_is_degraded(client):
    response = client.get("/api/v1/health")
    assert response.json()["status"] == "degraded"
