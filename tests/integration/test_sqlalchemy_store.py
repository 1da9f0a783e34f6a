"""Integration tests for the SQLAlchemy key-value store against SQLite."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from abvote.adapters.db.engine import make_engine
from abvote.adapters.kv_store import SqlAlchemyKeyValueStore
from abvote.adapters.kv_store.schema import kv_store
from abvote.interfaces.kv_store import KeyValueStoreError, QuotaExceededError


def test_values_survive_a_new_engine(sqlite_url_file):
    first = make_engine(sqlite_url_file)
    SqlAlchemyKeyValueStore(first).set("abtest_session", '"u1"')
    first.dispose()

    second = make_engine(sqlite_url_file)
    try:
        assert SqlAlchemyKeyValueStore(second).get("abtest_session") == '"u1"'
    finally:
        second.dispose()


def test_upsert_refreshes_updated_at(sqlite_engine_file):
    store = SqlAlchemyKeyValueStore(sqlite_engine_file)
    store.set("k", "1")
    with sqlite_engine_file.connect() as conn:
        before = conn.execute(select(kv_store.c.updated_at)).scalar_one()
    store.set("k", "2")
    with sqlite_engine_file.connect() as conn:
        rows = conn.execute(select(kv_store.c.value, kv_store.c.updated_at)).all()
    assert len(rows) == 1
    assert rows[0].value == "2"
    assert rows[0].updated_at >= before
    assert rows[0].updated_at.tzinfo is not None


def test_has_schema_is_false_before_migrations(sqlite_url_empty):
    engine = make_engine(sqlite_url_empty)
    try:
        assert not SqlAlchemyKeyValueStore(engine).has_schema()
    finally:
        engine.dispose()


def test_missing_table_is_a_store_error(sqlite_url_empty):
    engine = make_engine(sqlite_url_empty)
    store = SqlAlchemyKeyValueStore(engine)
    try:
        with pytest.raises(KeyValueStoreError) as excinfo:
            store.get("abtest_users")
        assert not isinstance(excinfo.value, QuotaExceededError)
        with pytest.raises(KeyValueStoreError):
            store.set("abtest_users", "[]")
    finally:
        engine.dispose()


class _DiskFull(Exception):
    def __str__(self) -> str:
        return "database or disk is full"


def test_disk_full_maps_to_quota(sqlite_engine_file, monkeypatch):
    store = SqlAlchemyKeyValueStore(sqlite_engine_file)

    def _boom(*args, **kwargs):
        raise OperationalError("INSERT", {}, _DiskFull())

    monkeypatch.setattr(store, "_upsert", _boom)
    with pytest.raises(QuotaExceededError) as excinfo:
        store.set("abtest_tests", "[]")
    assert excinfo.value.key == "abtest_tests"


def test_sqlite_pragmas_are_applied(sqlite_engine_file):
    with sqlite_engine_file.connect() as conn:
        mode = conn.exec_driver_sql("PRAGMA journal_mode").scalar_one()
        timeout = conn.exec_driver_sql("PRAGMA busy_timeout").scalar_one()
    assert mode.lower() == "wal"
    assert timeout == 5000
