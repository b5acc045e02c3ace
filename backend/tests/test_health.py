from fastapi.testclient import TestClient

import privlearn.routers.health as health_router_module


def test_health_reports_catalog_and_enrollments(client, auth_headers):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "total_modules": 4, "enrolled_accounts": 0}

    assert client.post("/ledger/enroll", headers=auth_headers).status_code == 200
    assert client.get("/health").json()["enrolled_accounts"] == 1


def test_health_live(client):
    r = client.get("/health/live")
    assert r.status_code == 200
    assert r.json().get("status") == "live"


def test_health_ready(client):
    r = client.get("/health/ready")
    assert r.status_code == 200
    assert r.json().get("status") == "ready"


def test_health_ready_when_redis_is_down(app, monkeypatch):
    class _Down:
        def ping(self):
            raise ConnectionError("redis down")

    monkeypatch.setattr(health_router_module, "get_redis", lambda: _Down())
    r = TestClient(app).get("/health/ready")
    assert r.status_code == 503
    assert r.json()["error_code"] == "redis_not_ready"


def test_health_routes_skip_access_log(client, caplog):
    with caplog.at_level("INFO", logger="privlearn"):
        client.get("/health")
    assert not [rec for rec in caplog.records if '"path": "/health"' in rec.getMessage()]
