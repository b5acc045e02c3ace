from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from privlearn.services.errors import CapacityExceeded, InvalidLessonCount, NotAdministrator, UnknownModule

logger = logging.getLogger("privlearn.catalog")

MAX_MODULES = 255
MAX_LESSONS = 255


@dataclass(frozen=True)
class CatalogModule:
    name: str
    lesson_count: int
    active: bool = True

    def to_dict(self, module_id: int) -> dict:
        return {
            "id": module_id,
            "name": self.name,
            "lesson_count": self.lesson_count,
            "active": self.active,
        }


DEFAULT_MODULES: tuple[CatalogModule, ...] = (
    CatalogModule(name="Cryptography Basics", lesson_count=4),
    CatalogModule(name="Blockchain Fundamentals", lesson_count=4),
    CatalogModule(name="Privacy Technologies", lesson_count=4),
    CatalogModule(name="Advanced Applications", lesson_count=4),
)


def _deny_all(_caller: str) -> bool:
    return False


def _check_lesson_count(lesson_count: int) -> int:
    n = int(lesson_count)
    if n < 1 or n > MAX_LESSONS:
        raise InvalidLessonCount(lesson_count=lesson_count)
    return n


class ModuleCatalog:
    """Ordered list of learning modules; ids are list positions starting at 0."""

    def __init__(
        self,
        default_modules: Iterable[CatalogModule] | None = None,
        *,
        is_administrator: Callable[[str], bool] = _deny_all,
        max_modules: int = MAX_MODULES,
    ):
        self._lock = threading.Lock()
        self._modules: list[CatalogModule] = []
        self._initialized = False
        self.is_administrator = is_administrator
        self.max_modules = max(1, min(int(max_modules), MAX_MODULES))
        self.initialize(DEFAULT_MODULES if default_modules is None else default_modules)

    def initialize(self, default_modules: Iterable[CatalogModule]) -> None:
        with self._lock:
            if self._initialized:
                raise RuntimeError("module catalog is already initialized")
            modules = [
                CatalogModule(name=m.name, lesson_count=_check_lesson_count(m.lesson_count), active=bool(m.active))
                for m in default_modules
            ]
            if len(modules) > self.max_modules:
                raise CapacityExceeded(max_modules=self.max_modules)
            self._modules = modules
            self._initialized = True

    @property
    def module_count(self) -> int:
        with self._lock:
            return len(self._modules)

    def get(self, module_id: int) -> CatalogModule:
        with self._lock:
            return self._get_locked(module_id)

    def list(self) -> list[CatalogModule]:
        with self._lock:
            return list(self._modules)

    def _get_locked(self, module_id: int) -> CatalogModule:
        if module_id < 0 or module_id >= len(self._modules):
            raise UnknownModule(module_id=module_id)
        return self._modules[module_id]

    def _require_admin(self, caller: str) -> None:
        if not self.is_administrator(caller):
            raise NotAdministrator(caller=caller)

    def add_module(self, caller: str, name: str, lesson_count: int) -> int:
        self._require_admin(caller)
        n = _check_lesson_count(lesson_count)
        with self._lock:
            if len(self._modules) >= self.max_modules:
                raise CapacityExceeded(max_modules=self.max_modules)
            self._modules.append(CatalogModule(name=str(name), lesson_count=n, active=True))
            module_id = len(self._modules) - 1

        logger.info("module added id=%s name=%r lessons=%s by=%s", module_id, name, n, caller)
        return module_id

    def toggle_module(self, caller: str, module_id: int) -> bool:
        self._require_admin(caller)
        with self._lock:
            current = self._get_locked(module_id)
            updated = CatalogModule(name=current.name, lesson_count=current.lesson_count, active=not current.active)
            self._modules[module_id] = updated

        logger.info("module toggled id=%s active=%s by=%s", module_id, updated.active, caller)
        return updated.active

    def discard_module(self, module_id: int) -> None:
        """Undo an ``add_module`` whose surrounding work failed.

        Only the most recently added module can be discarded, since ids are
        positions and must stay dense.
        """
        with self._lock:
            if module_id != len(self._modules) - 1:
                raise UnknownModule(module_id=module_id)
            self._modules.pop()

        logger.warning("module discarded id=%s", module_id)

    def set_module_active(self, caller: str, module_id: int, active: bool) -> bool:
        self._require_admin(caller)
        with self._lock:
            current = self._get_locked(module_id)
            self._modules[module_id] = CatalogModule(
                name=current.name, lesson_count=current.lesson_count, active=bool(active)
            )

        logger.info("module active set id=%s active=%s by=%s", module_id, bool(active), caller)
        return bool(active)
