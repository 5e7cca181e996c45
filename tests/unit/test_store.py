"""Tests for housekeeping.store - named collections and units of work."""

import threading

import pytest
from sqlalchemy.orm import sessionmaker

from housekeeping import store as keys
from housekeeping import supplies
from housekeeping.database import build_engine, init_db
from housekeeping.seed import seed_defaults
from housekeeping.store import CollectionStore, checklist_key, unit_of_work


def test_read_missing_returns_default(empty_db):
    store = CollectionStore(empty_db)
    assert store.read("nothing-here") is None
    assert store.read("nothing-here", []) == []
    assert not store.exists("nothing-here")


def test_write_then_read_whole_value(empty_db):
    with unit_of_work(empty_db) as store:
        store.write("rooms", [{"number": "101"}, {"number": "102"}])
    assert CollectionStore(empty_db).read("rooms") == [{"number": "101"}, {"number": "102"}]


def test_read_returns_a_copy(empty_db):
    with unit_of_work(empty_db) as store:
        store.write("rooms", [{"number": "101", "issues": []}])
    store = CollectionStore(empty_db)
    rooms = store.read("rooms")
    rooms[0]["issues"].append("leak")
    assert store.read("rooms") == [{"number": "101", "issues": []}]


def test_write_replaces_existing_value(empty_db):
    with unit_of_work(empty_db) as store:
        store.write("rooms", [{"number": "101"}])
    with unit_of_work(empty_db) as store:
        store.write("rooms", [{"number": "201"}])
    assert CollectionStore(empty_db).read("rooms") == [{"number": "201"}]


def test_failed_unit_of_work_writes_nothing(empty_db):
    with unit_of_work(empty_db) as store:
        store.write("rooms", [{"number": "101"}])

    with pytest.raises(RuntimeError):
        with unit_of_work(empty_db) as store:
            store.write("rooms", [])
            store.write("staff-data", [{"id": "1"}])
            raise RuntimeError("boom")

    store = CollectionStore(empty_db)
    assert store.read("rooms") == [{"number": "101"}]
    assert not store.exists("staff-data")


def test_keys_by_prefix(empty_db):
    with unit_of_work(empty_db) as store:
        store.write(checklist_key("101"), [])
        store.write(checklist_key("202"), [])
        store.write("rooms", [])
    store = CollectionStore(empty_db)
    assert store.keys(keys.CHECKLIST_PREFIX) == ["cleaning-tasks-101", "cleaning-tasks-202"]
    assert "rooms" in store.keys()


def test_seed_never_overwrites(empty_db, now):
    with unit_of_work(empty_db) as store:
        store.write(keys.ROOMS, [{"number": "999", "floor": 9}])
    written = seed_defaults(empty_db, now=now)
    assert written == 4
    assert CollectionStore(empty_db).read(keys.ROOMS) == [{"number": "999", "floor": 9}]
    assert seed_defaults(empty_db, now=now) == 0


def test_concurrent_mutations_are_serialized(tmp_path, now):
    engine = build_engine(f"sqlite:///{tmp_path / 'hms.db'}")
    init_db(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    setup = factory()
    seed_defaults(setup, now=now)
    supplies.adjust_stock(setup, "1", -1000)
    setup.close()

    def worker():
        session = factory()
        try:
            for _ in range(20):
                supplies.adjust_stock(session, "1", 1)
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    check = factory()
    try:
        assert supplies.get_supply(check, "1").current_stock == 80
    finally:
        check.close()
        engine.dispose()
