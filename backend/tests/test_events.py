import logging

from sqlalchemy import select

from privlearn.db.session import SessionLocal
from privlearn.models.audit import LearningEvent, LearningEventType
from privlearn.services.events import CollectingSink, FanoutSink, JournalSink, LedgerEvent, LoggingSink, deliver


def _event(account: str, **kw) -> LedgerEvent:
    return LedgerEvent(type=LearningEventType.lesson_completed, account=account, day=7, module_id=1, lesson_id=2, completed=True, **kw)


def test_journal_sink_persists_event(account):
    JournalSink()(_event(account))

    with SessionLocal() as db:
        rows = db.scalars(select(LearningEvent).where(LearningEvent.account == account)).all()

    assert len(rows) == 1
    assert rows[0].type == LearningEventType.lesson_completed
    assert (rows[0].module_id, rows[0].lesson_id, rows[0].completed, rows[0].day) == (1, 2, True, 7)


def test_fanout_isolates_failing_sink(account, caplog):
    collected = CollectingSink()

    def _boom(event):
        raise RuntimeError("down")

    with caplog.at_level(logging.ERROR, logger="privlearn.events"):
        FanoutSink(_boom, collected)(_event(account))

    assert len(collected.events) == 1
    assert "event sink failed" in caplog.text


def test_deliver_without_sink_is_noop(account):
    deliver(None, [_event(account)])


def test_logging_sink(account, caplog):
    with caplog.at_level(logging.INFO, logger="privlearn.events"):
        LoggingSink()(_event(account))
    assert "type=lesson_completed" in caplog.text
    assert account in caplog.text


def test_event_to_dict(account):
    data = _event(account).to_dict()
    assert data["type"] == "lesson_completed"
    assert data["account"] == account
