"""Per-invocation CLI state.

The root command records the store URL; subcommands ask for the wired
application, which is built on first use so ``--help`` and ``abvote db``
never touch the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import click
from sqlalchemy.exc import ArgumentError

from abvote import config
from abvote.bootstrap import AppContainer, bootstrap
from abvote.domain.models import User
from abvote.interfaces.kv_store import KeyValueStoreError

logger = logging.getLogger(__name__)

MISSING_SCHEMA_MSG = (
    "The store has not been initialized.\n"
    "Run 'abvote db upgrade' to create it."
)
INVALID_URL_FORMAT_MSG = "The store URL is not a valid SQLAlchemy database URL."
SIGN_IN_REQUIRED_MSG = "Please sign in first ('abvote account login')."


@dataclass
class CliState:
    """Holds what the root command resolved for its subcommands."""

    store_url: str | None = None
    _app: AppContainer | None = field(default=None, repr=False)

    def app(self) -> AppContainer:
        """Return the wired application, building it on first call.

        Raises:
            click.ClickException: On bad configuration or an uninitialized store.
        """
        if self._app is not None:
            return self._app
        try:
            container = bootstrap(self.store_url)
        except config.ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        except ArgumentError as e:
            raise click.ClickException(INVALID_URL_FORMAT_MSG) from e

        try:
            ready = container.store.has_schema()
        except KeyValueStoreError as e:
            raise click.ClickException(f"Cannot open the store: {e}") from e
        if not ready:
            raise click.ClickException(MISSING_SCHEMA_MSG)

        logger.debug("Store is initialized; application ready")
        self._app = container
        return container

    def require_user(self) -> User:
        """Return the signed-in user or exit asking the user to sign in."""
        user = self.app().session.current_user()
        if user is None:
            raise click.ClickException(SIGN_IN_REQUIRED_MSG)
        return user


pass_state = click.make_pass_decorator(CliState, ensure=True)
