"""ABVOTE DB CLI: forward-only Alembic wrappers.

Manages the schema of the durable key-value store. Destructive operations
(``downgrade``, ``stamp``) are not exposed; dropping the store is a matter of
deleting the database.

Behavior
- Uses programmatic Alembic configuration; human-oriented notices go to
  **stderr**, Alembic output to **stdout**.
- ``upgrade`` prompts for confirmation unless ``--force`` or ``--sql`` is given.

The store URL comes from ``--store-url`` on the root command, then
``ABVOTE_STORE_URL``, then the per-user SQLite default.

Failure modes
- Invalid URL or unreachable database → ``ClickException`` with guidance.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import text
from sqlalchemy.exc import ArgumentError, OperationalError

from abvote import config
from abvote.adapters.db.engine import make_engine

from .context import CliState, pass_state
from .helpers import error, sanitize_url, success, warn

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

INVALID_URL_FORMAT_MSG = "The store URL is not a valid SQLAlchemy database URL."

CANNOT_CONNECT_MSG = (
    "The store database is not reachable.\n"
    "Please ensure the database is running and the URL is correct."
)

UPGRADE_SCHEMA_WARNING = (
    "This will upgrade the store schema to the latest version.\n"
    "Please ensure you have a backup before proceeding."
)

UPGRADE_SCHEMA_INSTRUCTIONS = "Run 'abvote db upgrade' to update the schema."


def _check_connection(url: str) -> None:
    engine = make_engine(url)
    stmt = text("SELECT 1")  # pragma: no mutate
    try:
        with engine.connect() as conn:
            conn.execute(stmt)
    finally:
        engine.dispose()


def _get_url(state: CliState) -> str:
    url = state.store_url or config.get_store_url()
    try:
        _check_connection(url)
    except OperationalError as e:
        raise click.ClickException(CANNOT_CONNECT_MSG) from e
    except ArgumentError as e:
        raise click.ClickException(INVALID_URL_FORMAT_MSG) from e
    return url


verbose_option = click.option(
    "--verbose",
    "-v",
    "verbose",
    is_flag=True,
    help="Show alembic's more verbose output.",
)


@click.group(cls=clickx.ExtraGroup)
def db() -> None:
    """Store schema management commands."""


@db.command()
@verbose_option
@pass_state
def current(state: CliState, verbose: bool) -> None:
    """Show the store's current schema revision."""
    cfg = config.build_alembic_config(db_url=_get_url(state), stdout=sys.stdout)
    command.current(cfg, verbose=verbose)


@db.command()
@verbose_option
def heads(verbose: bool) -> None:
    """Show available head revisions."""
    cfg = config.build_alembic_config(stdout=sys.stdout)
    command.heads(cfg, verbose=verbose)


@db.command()
@verbose_option
@click.option(
    "--indicate-current",
    "-i",
    "indicate_current",
    is_flag=True,
    help="Indicate the current revision.",
)
@pass_state
def history(state: CliState, verbose: bool, indicate_current: bool) -> None:
    """Show revision history."""
    cfg = (
        config.build_alembic_config(db_url=_get_url(state), stdout=sys.stdout)
        if indicate_current
        else config.build_alembic_config(stdout=sys.stdout)
    )
    command.history(cfg, verbose=verbose, indicate_current=indicate_current)


@db.command()
@click.option("--sql", is_flag=True, help="Generate SQL without executing.")
@click.option("--force", is_flag=True, help="Upgrade without confirmation.")
@pass_state
def upgrade(state: CliState, sql: bool, force: bool) -> None:
    """Create or upgrade the store schema to the head revision."""
    if sql:
        url = state.store_url or config.get_store_url()
    else:
        url = _get_url(state)
    cfg = config.build_alembic_config(db_url=url, stdout=sys.stdout)
    if not force and not sql:
        warn(UPGRADE_SCHEMA_WARNING)
        click.secho(f"store: {click.style(sanitize_url(url), underline=True)}", err=True)
        click.confirm("Are you sure you want to proceed?", abort=True, err=True)
    command.upgrade(cfg, revision="head", sql=sql)
    if not sql:
        success("Upgrade complete!")


def _get_current_revision(engine: Engine) -> str | None:
    with engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def _get_head_revision(cfg: Config) -> str | None:
    script = ScriptDirectory.from_config(cfg)
    if results := script.get_heads():
        return results[0]
    return None  # pragma: nocover


class MigrationStatus(Enum):
    """Describes the migration status of the store schema."""

    UP_TO_DATE = "up to date"
    OUT_OF_DATE = "out of date"
    UNINITIALIZED = "uninitialized"


@db.command()
@pass_state
def status(state: CliState) -> None:
    """Show store connection and schema status."""
    try:
        url = _get_url(state)
    except click.ClickException as e:
        error("Cannot connect to the store")
        click.echo(e.format_message())
        raise click.exceptions.Exit(1) from e

    engine = make_engine(url)
    success("Store reachable")
    click.echo(f"Backend : {engine.dialect.name}")
    click.echo(f"URL     : {sanitize_url(engine.url)}")
    rev = _get_current_revision(engine)
    head = _get_head_revision(config.build_alembic_config(db_url=url))
    engine.dispose()

    if rev == head:
        migration_status = MigrationStatus.UP_TO_DATE
    elif rev is None:
        migration_status = MigrationStatus.UNINITIALIZED
    else:
        migration_status = MigrationStatus.OUT_OF_DATE  # pragma: nocover

    message = f"{rev} ({migration_status.value})" if rev else migration_status.value
    click.echo(f"Schema  : {message}")
    if migration_status is not MigrationStatus.UP_TO_DATE:
        warn(UPGRADE_SCHEMA_INSTRUCTIONS)
