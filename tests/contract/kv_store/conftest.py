"""Fixtures for key-value store contract tests."""

from collections.abc import Iterator

import pytest

from abvote.adapters.kv_store import MemoryKeyValueStore, SqlAlchemyKeyValueStore
from abvote.interfaces.kv_store import KeyValueStore

QUOTA_BYTES = 64


@pytest.fixture(params=["memory", "sqlite_memory", "sqlite_file"])
def kv_backend(request: pytest.FixtureRequest) -> Iterator[str]:
    """Name of the backend under test; see `make_kv_store`."""
    yield request.param


@pytest.fixture
def make_kv_store(request: pytest.FixtureRequest, kv_backend: str):
    """Factory building a store of the current backend with a given quota."""

    def _make(quota_bytes: int | None = None) -> KeyValueStore:
        match kv_backend:
            case "memory":
                return MemoryKeyValueStore(quota_bytes=quota_bytes)
            case "sqlite_memory":
                engine = request.getfixturevalue("sqlite_engine_memory")
                return SqlAlchemyKeyValueStore(engine, quota_bytes=quota_bytes)
            case "sqlite_file":
                engine = request.getfixturevalue("sqlite_engine_file")
                return SqlAlchemyKeyValueStore(engine, quota_bytes=quota_bytes)
            case _:
                raise ValueError(f"unknown key-value store backend: {kv_backend}")

    return _make


@pytest.fixture
def kv_store(make_kv_store) -> KeyValueStore:
    return make_kv_store()


@pytest.fixture
def kv_quota() -> int:
    return QUOTA_BYTES


@pytest.fixture
def limited_kv_store(make_kv_store, kv_quota: int) -> KeyValueStore:
    return make_kv_store(kv_quota)
