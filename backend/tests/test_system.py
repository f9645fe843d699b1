"""Health and version endpoint tests."""


def test_health_reports_constraints(client, db_session):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"]["status"] == "healthy"
    assert data["checks"]["soft_delete_constraints"]["status"] == "healthy"


def test_version(client):
    resp = client.get("/version")
    assert resp.status_code == 200
    assert resp.get_json()["api_version"] == "1.0.0"
