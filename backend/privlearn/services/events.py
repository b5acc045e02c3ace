"""Ledger notifications and the sinks that consume them.

The ledger hands every notification to a single sink callable after a
mutation has fully applied. Delivery is fire-and-forget: a failing sink is
logged and otherwise ignored, and never rolls back ledger state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from datetime import datetime

from privlearn.db import session as session_module
from privlearn.models.audit import LearningEvent, LearningEventType

logger = logging.getLogger("privlearn.events")


@dataclass(frozen=True)
class LedgerEvent:
    type: LearningEventType
    account: str
    day: int
    module_id: int | None = None
    lesson_id: int | None = None
    completed: bool | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        return data


EventSink = Callable[[LedgerEvent], None]


def deliver(sink: EventSink | None, events: Iterable[LedgerEvent]) -> None:
    if sink is None:
        return
    for event in events:
        try:
            sink(event)
        except Exception:
            logger.exception("event sink failed type=%s account=%s", event.type.value, event.account)


class LoggingSink:
    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, event: LedgerEvent) -> None:
        logger.log(
            self.level,
            "ledger event type=%s account=%s module=%s lesson=%s day=%s",
            event.type.value,
            event.account,
            event.module_id,
            event.lesson_id,
            event.day,
        )


class CollectingSink:
    def __init__(self):
        self.events: list[LedgerEvent] = []

    def __call__(self, event: LedgerEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: LearningEventType) -> list[LedgerEvent]:
        return [e for e in self.events if e.type == event_type]

    def clear(self) -> None:
        self.events.clear()


class JournalSink:
    """Persists every notification as a learning_events row."""

    def __call__(self, event: LedgerEvent) -> None:
        with session_module.SessionLocal() as db:
            db.add(
                LearningEvent(
                    account=event.account,
                    type=event.type,
                    module_id=event.module_id,
                    lesson_id=event.lesson_id,
                    completed=event.completed,
                    day=event.day,
                    created_at=datetime.utcnow(),
                )
            )
            db.commit()


class FanoutSink:
    def __init__(self, *sinks: EventSink):
        self.sinks = [s for s in sinks if s is not None]

    def __call__(self, event: LedgerEvent) -> None:
        for sink in self.sinks:
            deliver(sink, (event,))
