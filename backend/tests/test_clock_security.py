from datetime import datetime, timezone

from jose import jwt

from privlearn.core.clock import ManualClock, day_index
from privlearn.core.config import settings
from privlearn.core.security import create_access_token, is_administrator


def test_day_index_boundaries():
    assert day_index(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0
    assert day_index(datetime(1970, 1, 2, 0, 0, tzinfo=timezone.utc)) == 1
    assert day_index(datetime(1970, 1, 1, 23, 59, tzinfo=timezone.utc)) == 0
    assert day_index(datetime(1970, 1, 1, 23, 0, tzinfo=timezone.utc), offset_hours=2) == 1


def test_manual_clock():
    clock = ManualClock(5)
    assert clock() == 5
    assert clock.advance() == 6
    clock.set(1)
    assert clock() == 1


def test_token_subject_is_account():
    token = create_access_token(account="0xabc")
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm], issuer=settings.jwt_issuer)
    assert payload["sub"] == "0xabc"


def test_is_administrator(monkeypatch):
    monkeypatch.setattr(settings, "admin_accounts", "0xa, 0xb")
    assert is_administrator("0xa")
    assert is_administrator("0xb")
    assert not is_administrator("0xc")
    assert not is_administrator("")
