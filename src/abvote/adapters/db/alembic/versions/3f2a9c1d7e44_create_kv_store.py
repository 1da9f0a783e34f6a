"""create kv_store table

Revision ID: 3f2a9c1d7e44
Revises:
Create Date: 2026-10-19

"""

# pylint: disable=invalid-name

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from abvote.adapters.db.sa_types import UTCDateTime

# deal with alembic stuff
# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7e44"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "kv_store",
        sa.Column(
            "key",
            sa.String(length=200),
            nullable=False,
            comment="Namespaced key, e.g. 'abtest_tests'.",
        ),
        sa.Column(
            "value",
            sa.Text(),
            nullable=False,
            comment="Serialized value (JSON text written by the storage adapter).",
        ),
        sa.Column(
            "updated_at",
            UTCDateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="UTC timestamp of the last write.",
        ),
        sa.CheckConstraint("length(key) > 0", name=op.f("ck_kv_store_non_empty_key")),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_kv_store")),
        comment="Durable key-value store. Each write replaces the whole value.",
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("kv_store")
