from fastapi import FastAPI
from fastapi.testclient import TestClient

from privlearn.core.rate_limit import account_rate_limit, rate_limit
from privlearn.core.security import create_access_token
import privlearn.core.rate_limit as rate_limit_module


def _app(limit: int) -> FastAPI:
    app = FastAPI()

    @app.post("/write")
    def write(_: object = account_rate_limit(action="test_write", limit=limit, window_seconds=60)):
        return {"ok": True}

    @app.get("/lookup")
    def lookup(_: object = rate_limit(action="test_lookup", limit=limit, window_seconds=60)):
        return {"ok": True}

    return app


def _headers(account: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(account=account)}"}


def test_rate_limit_blocks_after_limit():
    client = TestClient(_app(2))
    h = _headers("0xalice")
    assert client.post("/write", headers=h).status_code == 200
    assert client.post("/write", headers=h).status_code == 200

    r = client.post("/write", headers=h)
    assert r.status_code == 429
    assert int(r.headers["Retry-After"]) > 0


def test_accounts_behind_one_address_have_separate_budgets():
    client = TestClient(_app(1))
    alice, bob = _headers("0xalice"), _headers("0xbob")

    assert client.post("/write", headers=alice).status_code == 200
    assert client.post("/write", headers=alice).status_code == 429
    assert client.post("/write", headers=bob).status_code == 200


def test_account_limit_needs_authentication():
    client = TestClient(_app(5))
    assert client.post("/write").status_code == 401


def test_anonymous_lookups_are_limited_per_address():
    client = TestClient(_app(1))
    assert client.get("/lookup").status_code == 200
    assert client.get("/lookup").status_code == 429


def test_rate_limit_fails_open(monkeypatch):
    class _Down:
        def incr(self, key):
            raise ConnectionError("redis down")

    monkeypatch.setattr(rate_limit_module, "get_redis", lambda: _Down())
    client = TestClient(_app(1))
    h = _headers("0xalice")
    assert client.post("/write", headers=h).status_code == 200
    assert client.post("/write", headers=h).status_code == 200
