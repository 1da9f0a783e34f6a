"""Session/auth: who is signed in.

The session is a single optional user id stored under the ``session`` key.
Nothing is cached in the process; every question is answered by reading the
store and resolving the id against the entity store, so a stale or tampered
pointer simply reads as "signed out".
"""

from __future__ import annotations

import logging

from abvote.domain.models import User
from abvote.domain.results import Err, Ok, Result
from abvote.service_layer.entity_store import EntityStore
from abvote.service_layer.storage import StorageAdapter

logger = logging.getLogger(__name__)

SESSION_KEY = "session"


class SessionManager:
    """Reads and writes the stored session pointer."""

    def __init__(self, storage: StorageAdapter, entities: EntityStore) -> None:
        self.storage = storage
        self.entities = entities

    def session_id(self) -> str | None:
        """Return the raw stored user id, if any."""
        value = self.storage.read(SESSION_KEY, None)
        return value if isinstance(value, str) and value else None

    def login(self, user_id: str) -> Result[None]:
        """Point the session at `user_id`, replacing any previous session."""
        if not self.storage.write(SESSION_KEY, user_id):
            return Err(self.storage.failure())
        logger.info("Session started for user %s", user_id)
        return Ok(None)

    def logout(self) -> Result[None]:
        """Clear the session pointer."""
        if not self.storage.write(SESSION_KEY, None):
            return Err(self.storage.failure())
        logger.info("Session cleared")
        return Ok(None)

    def current_user(self) -> User | None:
        """Return the signed-in user, or None if the pointer is unset or stale."""
        if (user_id := self.session_id()) is None:
            return None
        user = self.entities.get_user(user_id)
        if user is None:
            logger.warning("Session points at unknown user %s", user_id)
        return user

    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def sign_in(self, email: str, password: str) -> Result[User]:
        """Authenticate and start a session for the matching user."""
        result = self.entities.authenticate(email, password)
        if isinstance(result, Err):
            return result
        started = self.login(result.value.id)
        if isinstance(started, Err):
            return started
        return result

    def sign_up(self, email: str, password: str) -> Result[User]:
        """Register and immediately sign the new user in."""
        result = self.entities.register_user(email, password)
        if isinstance(result, Err):
            return result
        started = self.login(result.value.id)
        if isinstance(started, Err):
            return started
        return result
