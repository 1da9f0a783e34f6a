"""Configuration utilities for ABVOTE.

This module centralizes small helpers and constants related to application
configuration. Every setting is read from the environment so the CLI, tests
and embedding applications share one source of truth.
"""

import os
import sys
from importlib.resources import files
from pathlib import Path
from typing import TextIO

from alembic.config import Config
from platformdirs import user_data_dir
from sqlalchemy.engine import URL

from abvote.adapters.id_generators import ID_SCHEMES as ID_GENERATORS

ALEMBIC_URL_KEY = "sqlalchemy.url"  # pragma: no mutate
ALEMBIC_SCRIPT_LOCATION_KEY = "script_location"  # pragma: no mutate

STORE_URL_ENV = "ABVOTE_STORE_URL"
NAMESPACE_ENV = "ABVOTE_NAMESPACE"
QUOTA_ENV = "ABVOTE_STORE_QUOTA"
ID_SCHEME_ENV = "ABVOTE_ID_SCHEME"

DEFAULT_NAMESPACE = "abtest"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # what browsers typically grant localStorage
DEFAULT_ID_SCHEME = "ulid"
ID_SCHEMES = tuple(ID_GENERATORS)


class ConfigurationError(Exception):
    """Raised when an ABVOTE environment setting has an unusable value."""


def default_store_url() -> str:
    """Return the URL of the per-user SQLite store.

    The database file lives in the platform's user data directory
    (e.g. ``~/.local/share/abvote/abvote.db`` on Linux).
    """
    data_dir = Path(user_data_dir("abvote", appauthor=False, ensure_exists=True))
    return str(URL.create("sqlite+pysqlite", database=str(data_dir / "abvote.db")))


def get_store_url() -> str:
    """Get the store URL from the environment.

    Returns:
        The value of `ABVOTE_STORE_URL`, or the default per-user SQLite URL
        when it is unset or empty.
    """
    if url := os.environ.get(STORE_URL_ENV):
        return url
    return default_store_url()


def get_namespace() -> str:
    """Get the key namespace from the environment (`ABVOTE_NAMESPACE`).

    Raises:
        ConfigurationError: If the namespace contains whitespace.
    """
    namespace = os.environ.get(NAMESPACE_ENV) or DEFAULT_NAMESPACE
    if any(ch.isspace() for ch in namespace):
        raise ConfigurationError(f"{NAMESPACE_ENV} must not contain whitespace.")
    return namespace


def get_quota_bytes() -> int | None:
    """Get the store quota in bytes from the environment (`ABVOTE_STORE_QUOTA`).

    Returns:
        The quota, the default quota when unset, or ``None`` when set to ``0``
        (no quota).

    Raises:
        ConfigurationError: If the value is not a non-negative integer.
    """
    raw = os.environ.get(QUOTA_ENV)
    if raw is None or not raw.strip():
        return DEFAULT_QUOTA_BYTES
    try:
        quota = int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{QUOTA_ENV} must be an integer number of bytes, got {raw!r}."
        ) from e
    if quota < 0:
        raise ConfigurationError(f"{QUOTA_ENV} must not be negative, got {quota}.")
    return quota or None


def get_id_scheme() -> str:
    """Get the id scheme for new records from the environment (`ABVOTE_ID_SCHEME`).

    Raises:
        ConfigurationError: If the scheme is not one of `ID_SCHEMES`.
    """
    scheme = (os.environ.get(ID_SCHEME_ENV) or DEFAULT_ID_SCHEME).strip().lower()
    if scheme not in ID_SCHEMES:
        choices = ", ".join(ID_SCHEMES)
        raise ConfigurationError(
            f"{ID_SCHEME_ENV} must be one of {choices}, got {scheme!r}."
        )
    return scheme


def build_alembic_config(
    db_url: str | None = None, stdout: TextIO | None = None
) -> Config:
    """Build an Alembic `Config` object for ABVOTE's migrations.

    Sets only Alembic "main" options:
    - `sqlalchemy.url` → the database URL you pass
    - `script_location` → ABVOTE's packaged Alembic scripts

    Args:
        db_url: SQLAlchemy database URL (e.g., `sqlite:///:memory:`). Can be
            `None` (default) only in contexts where Alembic won't need to
            connect to the DB.
        stdout: Text stream Alembic will write status lines to. Defaults to
            the current `sys.stdout`.

    Returns:
        An `alembic.config.Config` pointing to ABVOTE's migration scripts.
    """
    cfg = Config(stdout=stdout or sys.stdout)
    if db_url is not None:
        # configparser interpolation: a literal % must be doubled
        cfg.set_main_option(ALEMBIC_URL_KEY, db_url.replace("%", "%%"))
    cfg.set_main_option(
        ALEMBIC_SCRIPT_LOCATION_KEY,
        str(files("abvote.adapters.db.alembic")),
    )
    return cfg
