import pytest

from privlearn.services.catalog import DEFAULT_MODULES, CatalogModule, ModuleCatalog
from privlearn.services.errors import CapacityExceeded, InvalidLessonCount, NotAdministrator, UnknownModule

from conftest import ADMIN


def test_default_catalog(catalog):
    assert catalog.module_count == 4
    names = [m.name for m in catalog.list()]
    assert names == [
        "Cryptography Basics",
        "Blockchain Fundamentals",
        "Privacy Technologies",
        "Advanced Applications",
    ]
    assert all(m.lesson_count == 4 and m.active for m in catalog.list())


def test_get_unknown_module(catalog):
    assert catalog.get(3).name == "Advanced Applications"
    with pytest.raises(UnknownModule):
        catalog.get(4)
    with pytest.raises(UnknownModule):
        catalog.get(-1)


def test_initialize_runs_once(catalog):
    with pytest.raises(RuntimeError):
        catalog.initialize(DEFAULT_MODULES)
    assert catalog.module_count == 4


def test_add_module_appends_contiguous_id(catalog):
    assert catalog.add_module(ADMIN, "Zero Knowledge Proofs", 6) == 4
    assert catalog.add_module(ADMIN, "MPC", 1) == 5
    assert catalog.get(4) == CatalogModule(name="Zero Knowledge Proofs", lesson_count=6, active=True)


def test_add_module_requires_admin(catalog):
    with pytest.raises(NotAdministrator):
        catalog.add_module("0xstudent", "Sneaky", 4)
    assert catalog.module_count == 4


@pytest.mark.parametrize("lesson_count", [0, -1, 256])
def test_add_module_rejects_bad_lesson_count(catalog, lesson_count):
    with pytest.raises(InvalidLessonCount):
        catalog.add_module(ADMIN, "Bad", lesson_count)
    assert catalog.module_count == 4


def test_add_module_beyond_capacity(admin_gate):
    catalog = ModuleCatalog(is_administrator=admin_gate, max_modules=5)
    catalog.add_module(ADMIN, "Fifth", 4)

    with pytest.raises(CapacityExceeded):
        catalog.add_module(ADMIN, "Sixth", 4)
    assert catalog.module_count == 5


def test_default_modules_over_capacity():
    with pytest.raises(CapacityExceeded):
        ModuleCatalog(DEFAULT_MODULES, max_modules=2)


def test_toggle_module(catalog):
    assert catalog.toggle_module(ADMIN, 2) is False
    assert catalog.get(2).active is False
    assert catalog.toggle_module(ADMIN, 2) is True

    with pytest.raises(UnknownModule):
        catalog.toggle_module(ADMIN, 4)
    with pytest.raises(NotAdministrator):
        catalog.toggle_module("0xstudent", 0)
