import sys
import time
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from privlearn.db.base import Base
from privlearn.db import session as session_module

# Import models so that they are registered in Base.metadata before create_all.
from privlearn.models.audit import LearningEvent  # noqa: F401
from privlearn.models.security_audit import SecurityAuditEvent  # noqa: F401


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}

    def ping(self):
        return True

    def _now(self) -> float:
        return time.time()

    def _get_entry(self, key: str):
        v = self._data.get(key)
        if not v:
            return None
        value, exp = v
        if exp is not None and exp <= self._now():
            self._data.pop(key, None)
            return None
        return value, exp

    def get(self, key: str):
        entry = self._get_entry(key)
        return entry[0] if entry else None

    def incr(self, key: str):
        cur = self.get(key)
        n = int(cur or 0) + 1
        _, exp = self._data.get(key, ("", None))
        self._data[key] = (str(n), exp)
        return n

    def expire(self, key: str, seconds: int):
        entry = self._get_entry(key)
        if not entry:
            return False
        value, _ = entry
        self._data[key] = (value, self._now() + int(seconds))
        return True

    def ttl(self, key: str):
        entry = self._get_entry(key)
        if not entry:
            return -2
        _, exp = entry
        if exp is None:
            return -1
        return max(0, int(exp - self._now()))

    def flushall(self):
        self._data.clear()


# Configure test DB (SQLite in-memory) at import time so everything that goes
# through privlearn.db.session.SessionLocal gets the patched version.
_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(bind=_engine)
session_module.engine = _engine
session_module.SessionLocal = session_module.sessionmaker(autocommit=False, autoflush=False, bind=_engine)


# Stub Redis at import time (rate limiting + readiness probe).
_mem_redis = _MemoryRedis()
import privlearn.core.redis_client as redis_client_module

redis_client_module.get_redis = lambda: _mem_redis

import privlearn.core.rate_limit as rate_limit_module
rate_limit_module.get_redis = lambda: _mem_redis

import privlearn.routers.health as health_router_module
health_router_module.get_redis = lambda: _mem_redis

from privlearn.core.clock import ManualClock
from privlearn.core.config import settings
from privlearn.core.security import create_access_token
from privlearn.main import create_app
from privlearn.services.catalog import ModuleCatalog
from privlearn.services.events import CollectingSink, FanoutSink, JournalSink
from privlearn.services.ledger import ProgressLedger

ADMIN = "0xadmin0000000000000000000000000000000001"


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    _mem_redis.flushall()
    yield


@pytest.fixture()
def clock():
    return ManualClock(day=100)


@pytest.fixture()
def sink():
    return CollectingSink()


@pytest.fixture()
def admin_gate():
    return lambda caller: caller == ADMIN


@pytest.fixture()
def catalog(admin_gate):
    return ModuleCatalog(is_administrator=admin_gate)


@pytest.fixture()
def ledger(catalog, clock, sink):
    return ProgressLedger(catalog=catalog, clock=clock, sink=sink)


@pytest.fixture()
def account():
    return f"0x{uuid.uuid4().hex}"


@pytest.fixture()
def app(clock, sink, monkeypatch):
    monkeypatch.setattr(settings, "admin_accounts", ADMIN)
    return create_app(clock=clock, sink=FanoutSink(sink, JournalSink()))


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def auth_headers(account):
    token = create_access_token(account=account)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers():
    token = create_access_token(account=ADMIN)
    return {"Authorization": f"Bearer {token}"}
