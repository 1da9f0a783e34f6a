"""Key-value store schema.

Defines the ``kv_store`` table: one row per namespaced key (``abtest_users``,
``abtest_session``, ``abtest_tests``), holding the JSON text the storage
adapter wrote.

| Constraint              | Purpose                       |
|-------------------------|-------------------------------|
| PRIMARY KEY(key)        | one value per key             |
| CHECK(length(key) > 0)  | empty keys are meaningless    |
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, String, Table, Text, text

from abvote.adapters.db.metadata import metadata
from abvote.adapters.db.sa_types import UTCDateTime

__all__ = ["kv_store", "KEY_MAX_LENGTH"]

KEY_MAX_LENGTH = 200

kv_store = Table(
    "kv_store",
    metadata,
    Column(
        "key",
        String(KEY_MAX_LENGTH),
        primary_key=True,
        comment="Namespaced key, e.g. 'abtest_tests'.",
    ),
    Column(
        "value",
        Text,
        nullable=False,
        comment="Serialized value (JSON text written by the storage adapter).",
    ),
    Column(
        "updated_at",
        UTCDateTime(),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="UTC timestamp of the last write.",
    ),
    CheckConstraint("length(key) > 0", name="non_empty_key"),
    comment="Durable key-value store. Each write replaces the whole value.",
)
