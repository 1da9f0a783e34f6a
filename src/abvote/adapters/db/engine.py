"""Database engine factory.

Every Engine that talks to the durable store should come from `make_engine`
so connections are configured the same way everywhere.

- **SQLite**: each new connection runs `SQLITE_PRAGMAS`: WAL journaling,
  balanced durability, in-memory temp storage, and a busy timeout so a
  second CLI process waits for the write lock instead of failing at once.
- **Other backends**: used as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SQLITE_BUSY_TIMEOUT_MS = 5000
SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA temp_store=MEMORY",
    f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}",
)


def is_sqlite(url: str | URL) -> bool:
    """Return True if `url` points at a SQLite database (any driver)."""
    return make_url(url).get_backend_name() == "sqlite"


def _apply_sqlite_pragmas(dbapi_conn: Any, _conn_record: Any) -> None:
    cur = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cur.execute(pragma)
    finally:
        cur.close()


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a configured SQLAlchemy Engine for `url`.

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.

    Raises:
        sqlalchemy.exc.ArgumentError: If `url` cannot be parsed.
    """
    engine = create_engine(url, echo=echo)
    if is_sqlite(url):
        event.listen(engine, "connect", _apply_sqlite_pragmas)
    return engine
