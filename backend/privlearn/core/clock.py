from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from privlearn.core.config import settings

DayClock = Callable[[], int]

SECONDS_PER_DAY = 86400


def day_index(ts: datetime, *, offset_hours: int = 0) -> int:
    """Whole days since the unix epoch, with the day boundary shifted by offset_hours."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    shifted = ts.astimezone(timezone.utc) + timedelta(hours=int(offset_hours))
    return int(shifted.timestamp()) // SECONDS_PER_DAY


def utc_day_clock(offset_hours: int | None = None) -> DayClock:
    hours = settings.ledger_day_offset_hours if offset_hours is None else int(offset_hours)

    def _now() -> int:
        return day_index(datetime.now(timezone.utc), offset_hours=hours)

    return _now


class ManualClock:
    """Day clock driven by hand; used by tests and local scripts."""

    def __init__(self, day: int = 0):
        self.day = int(day)

    def __call__(self) -> int:
        return self.day

    def advance(self, days: int = 1) -> int:
        self.day += int(days)
        return self.day

    def set(self, day: int) -> None:
        self.day = int(day)
