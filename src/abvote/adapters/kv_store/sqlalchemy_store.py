"""SQLAlchemy-backed key-value store.

Persists values in the ``kv_store`` table (see `adapters.kv_store.schema`).
Each call runs in its own short transaction, so a write is durable once
`set()` returns.

Writes are upserts: dialect-specific ``INSERT ... ON CONFLICT DO UPDATE`` on
SQLite and PostgreSQL, update-then-insert elsewhere.

Error mapping:
    - SQLite "database or disk is full" and the optional byte quota
      → `QuotaExceededError`
    - any other `DBAPIError` (missing table, locked database, bad URL...)
      → `KeyValueStoreError`
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import TYPE_CHECKING, NoReturn

from sqlalchemy import delete, insert, inspect, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError, OperationalError

from abvote.adapters.db.dialects import DialectName, UnsupportedDialect
from abvote.interfaces.kv_store import (
    KeyValueStore,
    KeyValueStoreError,
    QuotaExceededError,
)

from .schema import kv_store

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

__all__ = ["SqlAlchemyKeyValueStore"]

logger = logging.getLogger(__name__)

# all keywords must be present in the driver message
DISK_FULL_KEYWORDS = ("disk", "full")  # pragma: no mutate


def _size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class SqlAlchemyKeyValueStore(KeyValueStore):
    """`KeyValueStore` over a relational table.

    Args:
        engine: Engine for the store database (see `adapters.db.engine.make_engine`).
        quota_bytes: Optional cap on the total UTF-8 size of stored keys and
            values; ``None`` means unlimited.
    """

    def __init__(self, engine: Engine, quota_bytes: int | None = None):
        self.engine = engine
        self.quota_bytes = quota_bytes

    # --------------------------------------------------------------------- #
    # Interface implementation
    # --------------------------------------------------------------------- #

    def get(self, key: str) -> str | None:
        stmt = select(kv_store.c.value).where(kv_store.c.key == key)
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).scalar_one_or_none()
        except DBAPIError as e:
            self._raise_store_error(e, key)

    def set(self, key: str, value: str) -> None:
        try:
            with self.engine.begin() as conn:
                if self.quota_bytes is not None:
                    self._check_quota(conn, key, value, self.quota_bytes)
                self._upsert(conn, key, value)
        except DBAPIError as e:
            self._raise_store_error(e, key)
        logger.debug("Stored %d bytes under %r", _size(key, value), key)

    def delete(self, key: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(kv_store).where(kv_store.c.key == key))
        except DBAPIError as e:
            self._raise_store_error(e, key)

    def keys(self) -> Iterator[str]:
        stmt = select(kv_store.c.key).order_by(kv_store.c.key.asc())
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).scalars().all()
        except DBAPIError as e:
            self._raise_store_error(e, "*")
        return iter(rows)

    def usage_bytes(self) -> int:
        try:
            with self.engine.connect() as conn:
                return self._usage(conn)
        except DBAPIError as e:
            self._raise_store_error(e, "*")

    def has_schema(self) -> bool:
        """Return True if the ``kv_store`` table exists (see ``abvote db upgrade``)."""
        try:
            return inspect(self.engine).has_table(kv_store.name)
        except DBAPIError as e:
            self._raise_store_error(e, "*")

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    @staticmethod
    def _usage(conn: Connection, exclude: str | None = None) -> int:
        stmt = select(kv_store.c.key, kv_store.c.value)
        if exclude is not None:
            stmt = stmt.where(kv_store.c.key != exclude)
        return sum(_size(row.key, row.value) for row in conn.execute(stmt))

    @classmethod
    def _check_quota(
        cls, conn: Connection, key: str, value: str, quota_bytes: int
    ) -> None:
        if cls._usage(conn, exclude=key) + _size(key, value) > quota_bytes:
            raise QuotaExceededError(key, quota_bytes)

    def _upsert(self, conn: Connection, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        values = {"key": key, "value": value, "updated_at": now}
        try:
            dialect_name = DialectName.from_sqlalchemy(conn)
        except UnsupportedDialect:
            dialect_name = None

        if dialect_name is DialectName.SQLITE:
            stmt = sqlite_insert(kv_store).values(**values)
            conn.execute(
                stmt.on_conflict_do_update(
                    index_elements=[kv_store.c.key],
                    set_={"value": stmt.excluded.value, "updated_at": now},
                )
            )
        elif dialect_name is DialectName.POSTGRES:
            stmt = pg_insert(kv_store).values(**values)
            conn.execute(
                stmt.on_conflict_do_update(
                    index_elements=[kv_store.c.key],
                    set_={"value": stmt.excluded.value, "updated_at": now},
                )
            )
        else:
            result = conn.execute(
                update(kv_store)
                .where(kv_store.c.key == key)
                .values(value=value, updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(insert(kv_store).values(**values))

    @staticmethod
    def _raise_store_error(error: DBAPIError, key: str) -> NoReturn:
        message = str(error.orig).lower()
        if isinstance(error, OperationalError) and all(
            kw in message for kw in DISK_FULL_KEYWORDS
        ):
            raise QuotaExceededError(key) from error
        raise KeyValueStoreError(f"store operation on {key!r} failed: {error.orig}") from error
