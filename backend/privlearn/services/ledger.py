"""Per-account enrollment, lesson completion and progress aggregation.

Each account moves from unenrolled to enrolled exactly once. Lesson flags are
stored per (module, lesson) and every derived figure is recomputed from the
full flag matrix and the current catalog after each write and on each read:

- module progress is ``completed * 100 // lesson_count``
- total progress is the truncating mean of the module percentages, which is
  not the same as a lesson-weighted average (1 of 3 lessons gives 33%, and
  [33, 0, 0, 0] averages to 8)
- completed lessons counts every set flag across all modules

The learning streak only moves when a lesson is marked complete on a day
later than the last active day.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from privlearn.core.clock import DayClock
from privlearn.models.audit import LearningEventType
from privlearn.services.catalog import CatalogModule, ModuleCatalog
from privlearn.services.errors import (
    AlreadyEnrolled,
    ModuleInactive,
    NotEnrolled,
    UnknownLesson,
    UnknownModule,
)
from privlearn.services.events import EventSink, LedgerEvent, deliver

logger = logging.getLogger("privlearn.ledger")


@dataclass
class AccountProgress:
    enrolled_day: int
    last_active_day: int
    enrolled: bool = True
    lesson_completed: dict[int, list[bool]] = field(default_factory=dict)
    module_progress: dict[int, int] = field(default_factory=dict)
    total_progress: int = 0
    completed_lessons: int = 0
    learning_streak: int = 0


@dataclass(frozen=True)
class Aggregates:
    module_progress: dict[int, int]
    total_progress: int
    completed_lessons: int


@dataclass(frozen=True)
class ModuleSnapshot:
    module_id: int
    progress: int
    lessons: tuple[bool, ...]


@dataclass(frozen=True)
class ProgressSnapshot:
    account: str
    enrolled_day: int
    last_active_day: int
    learning_streak: int
    total_progress: int
    completed_lessons: int
    completed_modules: int
    modules: tuple[ModuleSnapshot, ...]


def compute_aggregates(
    lesson_completed: Mapping[int, Sequence[bool]],
    modules: Sequence[CatalogModule],
) -> Aggregates:
    module_progress: dict[int, int] = {}
    for module_id, module in enumerate(modules):
        flags = lesson_completed.get(module_id, ())
        done = sum(1 for f in flags[: module.lesson_count] if f)
        module_progress[module_id] = done * 100 // module.lesson_count

    total = sum(module_progress.values()) // len(modules) if modules else 0
    completed = sum(sum(1 for f in flags if f) for flags in lesson_completed.values())
    return Aggregates(module_progress=module_progress, total_progress=total, completed_lessons=completed)


def advance_streak(streak: int, last_active_day: int, today: int) -> tuple[int, int]:
    """Return (streak, last_active_day) after a completion recorded on ``today``."""
    if today == last_active_day + 1:
        return streak + 1, today
    if today > last_active_day + 1:
        return 1, today
    # Same day, or a clock that went backwards.
    return streak, last_active_day


@dataclass
class _AccountSlot:
    # ``lock`` guards the record and the outbox; ``delivery`` keeps the
    # account's events in order while they are handed to the sink.
    lock: threading.Lock = field(default_factory=threading.Lock)
    delivery: threading.Lock = field(default_factory=threading.Lock)
    outbox: deque[LedgerEvent] = field(default_factory=deque)


class ProgressLedger:
    """Enrollment and completion state for every account.

    Mutations for one account are serialized by its lock. Events are queued
    under that lock and handed to the sink after it is released, so a slow
    sink never blocks reads of the account.
    """

    def __init__(self, catalog: ModuleCatalog, clock: DayClock, sink: EventSink | None = None):
        self.catalog = catalog
        self.clock = clock
        self.sink = sink
        self._records: dict[str, AccountProgress] = {}
        self._slots: dict[str, _AccountSlot] = {}
        self._slots_guard = threading.Lock()

    def _slot_for(self, account: str) -> _AccountSlot:
        with self._slots_guard:
            slot = self._slots.get(account)
            if slot is None:
                slot = _AccountSlot()
                self._slots[account] = slot
            return slot

    def _require_record(self, account: str) -> AccountProgress:
        record = self._records.get(account)
        if record is None or not record.enrolled:
            raise NotEnrolled(account=account)
        return record

    def _enrolled_lock(self, account: str) -> threading.Lock:
        # Unknown accounts must not allocate a slot just by being queried.
        self._require_record(account)
        return self._slot_for(account).lock

    @staticmethod
    def _check_module(modules: Sequence[CatalogModule], module_id: int) -> CatalogModule:
        if module_id < 0 or module_id >= len(modules):
            raise UnknownModule(module_id=module_id)
        return modules[module_id]

    @staticmethod
    def _check_lesson(module: CatalogModule, module_id: int, lesson_id: int) -> None:
        if lesson_id < 0 or lesson_id >= module.lesson_count:
            raise UnknownLesson(module_id=module_id, lesson_id=lesson_id)

    @staticmethod
    def _refresh_locked(record: AccountProgress, modules: Sequence[CatalogModule]) -> Aggregates:
        """Recompute the stored aggregates against the catalog as it is now."""
        agg = compute_aggregates(record.lesson_completed, modules)
        record.module_progress = agg.module_progress
        record.total_progress = agg.total_progress
        record.completed_lessons = agg.completed_lessons
        return agg

    def _flush(self, slot: _AccountSlot) -> None:
        with slot.delivery:
            while True:
                with slot.lock:
                    if not slot.outbox:
                        return
                    event = slot.outbox.popleft()
                deliver(self.sink, (event,))

    def is_enrolled(self, account: str) -> bool:
        record = self._records.get(account)
        return record is not None and record.enrolled

    def enroll(self, account: str) -> ProgressSnapshot:
        slot = self._slot_for(account)
        with slot.lock:
            if self.is_enrolled(account):
                raise AlreadyEnrolled(account=account)

            today = self.clock()
            modules = self.catalog.list()
            record = AccountProgress(enrolled_day=today, last_active_day=today)
            self._refresh_locked(record, modules)
            self._records[account] = record

            logger.info("account enrolled account=%s day=%s", account, today)
            slot.outbox.append(LedgerEvent(type=LearningEventType.enrolled, account=account, day=today))
            snap = self._snapshot_locked(account, record, modules)

        self._flush(slot)
        return snap

    def record_completion(self, account: str, module_id: int, lesson_id: int, completed: bool) -> ProgressSnapshot:
        self._require_record(account)
        slot = self._slot_for(account)
        with slot.lock:
            record = self._require_record(account)
            modules = self.catalog.list()
            module = self._check_module(modules, module_id)
            self._check_lesson(module, module_id, lesson_id)
            if not module.active:
                raise ModuleInactive(module_id=module_id)

            today = self.clock()
            completed = bool(completed)

            flags = record.lesson_completed.setdefault(module_id, [False] * module.lesson_count)
            if len(flags) < module.lesson_count:
                flags.extend([False] * (module.lesson_count - len(flags)))
            flags[lesson_id] = completed

            if completed:
                record.learning_streak, record.last_active_day = advance_streak(
                    record.learning_streak, record.last_active_day, today
                )

            agg = self._refresh_locked(record, modules)

            logger.debug(
                "lesson recorded account=%s module=%s lesson=%s completed=%s module_progress=%s total=%s streak=%s",
                account,
                module_id,
                lesson_id,
                completed,
                agg.module_progress.get(module_id),
                agg.total_progress,
                record.learning_streak,
            )

            slot.outbox.append(
                LedgerEvent(
                    type=LearningEventType.lesson_completed,
                    account=account,
                    day=today,
                    module_id=module_id,
                    lesson_id=lesson_id,
                    completed=completed,
                )
            )
            if agg.module_progress.get(module_id) == 100:
                slot.outbox.append(
                    LedgerEvent(type=LearningEventType.module_completed, account=account, day=today, module_id=module_id)
                )
            slot.outbox.append(LedgerEvent(type=LearningEventType.progress_updated, account=account, day=today))
            snap = self._snapshot_locked(account, record, modules)

        self._flush(slot)
        return snap

    def total_progress(self, account: str) -> int:
        with self._enrolled_lock(account):
            record = self._require_record(account)
            return self._refresh_locked(record, self.catalog.list()).total_progress

    def module_progress(self, account: str, module_id: int) -> int:
        with self._enrolled_lock(account):
            record = self._require_record(account)
            modules = self.catalog.list()
            self._check_module(modules, module_id)
            return self._refresh_locked(record, modules).module_progress[module_id]

    def completed_lessons(self, account: str) -> int:
        with self._enrolled_lock(account):
            return self._require_record(account).completed_lessons

    def completed_modules(self, account: str) -> int:
        with self._enrolled_lock(account):
            record = self._require_record(account)
            agg = self._refresh_locked(record, self.catalog.list())
            return sum(1 for p in agg.module_progress.values() if p == 100)

    def learning_streak(self, account: str) -> int:
        with self._enrolled_lock(account):
            return self._require_record(account).learning_streak

    def is_lesson_completed(self, account: str, module_id: int, lesson_id: int) -> bool:
        with self._enrolled_lock(account):
            record = self._require_record(account)
            module = self._check_module(self.catalog.list(), module_id)
            self._check_lesson(module, module_id, lesson_id)
            flags = record.lesson_completed.get(module_id, ())
            return lesson_id < len(flags) and bool(flags[lesson_id])

    def snapshot(self, account: str) -> ProgressSnapshot:
        with self._enrolled_lock(account):
            record = self._require_record(account)
            modules = self.catalog.list()
            self._refresh_locked(record, modules)
            return self._snapshot_locked(account, record, modules)

    def _snapshot_locked(
        self,
        account: str,
        record: AccountProgress,
        modules: Sequence[CatalogModule],
    ) -> ProgressSnapshot:
        items = []
        for module_id, module in enumerate(modules):
            flags = record.lesson_completed.get(module_id, [])
            lessons = tuple(bool(flags[i]) if i < len(flags) else False for i in range(module.lesson_count))
            items.append(
                ModuleSnapshot(
                    module_id=module_id,
                    progress=record.module_progress.get(module_id, 0),
                    lessons=lessons,
                )
            )
        return ProgressSnapshot(
            account=account,
            enrolled_day=record.enrolled_day,
            last_active_day=record.last_active_day,
            learning_streak=record.learning_streak,
            total_progress=record.total_progress,
            completed_lessons=record.completed_lessons,
            completed_modules=sum(1 for p in record.module_progress.values() if p == 100),
            modules=tuple(items),
        )

    def __len__(self) -> int:
        return len(self._records)
