"""sqlite-specific fixtures"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from alembic import command
from sqlalchemy.engine import URL

from abvote import config
from abvote.adapters.db.engine import make_engine
from abvote.adapters.db.metadata import metadata

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_engine_memory() -> Iterator[Engine]:
    """In-memory SQLite engine with the schema created from metadata.

    No Alembic migrations run here; see `sqlite_engine_file` for that.
    """
    test_engine = make_engine("sqlite+pysqlite:///:memory:")
    metadata.create_all(test_engine)
    yield test_engine
    metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def sqlite_url_file(tmp_path: Path) -> str:
    """URL of a temp-file SQLite store migrated to head via Alembic."""
    url = str(URL.create("sqlite+pysqlite", database=str(tmp_path / "abvote.db")))
    command.upgrade(config.build_alembic_config(url), "head")
    return url


@pytest.fixture
def sqlite_url_empty(tmp_path: Path) -> str:
    """URL of a temp-file SQLite database with no schema yet."""
    return str(URL.create("sqlite+pysqlite", database=str(tmp_path / "fresh.db")))


@pytest.fixture
def sqlite_engine_file(sqlite_url_file: str) -> Iterator[Engine]:
    """File-backed SQLite engine migrated via Alembic (per test).

    Each test gets its own database file; nothing is downgraded on teardown.
    """
    test_engine = make_engine(sqlite_url_file)
    try:
        yield test_engine
    finally:
        test_engine.dispose()
