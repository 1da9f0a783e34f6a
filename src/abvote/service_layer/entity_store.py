"""Entity store: the Users and Tests collections.

Every mutation is one read-whole-collection → mutate → write-whole-collection
cycle through the `StorageAdapter`; nothing is updated in place. Operations
return `Ok`/`Err` results and never raise for domain conditions.

If the collection cannot be read (or is not a list), a mutation returns the
read failure rather than writing a collection rebuilt from the empty default.
Individual records that do not parse are left out of every listing but kept
as stored: mutations write them back unchanged after the readable records.

Concurrency: safe within one process because each cycle completes before the
next starts. Two processes sharing a store race, and the last writer wins
on the whole collection. This is an accepted limitation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from abvote.domain import errors
from abvote.domain.models import (
    ABTest,
    User,
    VoteOption,
    VoteTally,
    vote_tally,
)
from abvote.domain.results import Err, Ok, Result
from abvote.interfaces.id_generator import IdGenerator
from abvote.service_layer.storage import StorageAdapter

logger = logging.getLogger(__name__)

USERS_KEY = "users"
TESTS_KEY = "tests"
MIN_PASSWORD_LENGTH = 6
ANONYMOUS_LABEL = "Submitted by Anonymous"

M = TypeVar("M", User, ABTest)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Collection(Generic[M]):
    """A loaded collection: parsed records plus the raw ones that did not parse."""

    items: list[M]
    unreadable: list[Any] = field(default_factory=list)

    def to_records(self) -> list[Any]:
        return [item.to_record() for item in self.items] + self.unreadable


def _taken_emails(users: _Collection[User]) -> set[str]:
    """Lowercased emails of every stored user, unreadable records included."""
    taken = {user.email.lower() for user in users.items}
    taken.update(
        record["email"].lower()
        for record in users.unreadable
        if isinstance(record, dict) and isinstance(record.get("email"), str)
    )
    return taken


class EntityStore:
    """Typed access to users and A/B tests.

    Args:
        storage: Adapter over the durable key-value store.
        id_generator: Source of ids for new users and tests.
        clock: Returns the current aware UTC time (soft-delete stamps).
    """

    def __init__(
        self,
        storage: StorageAdapter,
        id_generator: IdGenerator,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.storage = storage
        self.id_generator = id_generator
        self.clock = clock

    # --------------------------------------------------------------------- #
    # Users
    # --------------------------------------------------------------------- #

    def register_user(self, email: str, password: str) -> Result[User]:
        """Create an account.

        Fails with `DuplicateEmailError` if the email is taken in any case
        (unreadable stored records included), then with `WeakPasswordError` if
        the password is too short.
        """
        loaded = self._load_users()
        if isinstance(loaded, Err):
            return loaded
        collection = loaded.value

        normalized = email.lower()
        if normalized in _taken_emails(collection):
            return Err(errors.DuplicateEmailError(normalized))
        if len(password) < MIN_PASSWORD_LENGTH:
            return Err(errors.WeakPasswordError(MIN_PASSWORD_LENGTH))

        user = User(id=self.id_generator.new_id(), email=normalized, password=password)
        collection.items.append(user)
        if not self._save_users(collection):
            return Err(self.storage.failure())
        logger.info("Registered user %s", user.id)
        return Ok(user)

    def authenticate(self, email: str, password: str) -> Result[User]:
        """Return the user matching `email` (any case) and `password` exactly.

        A users collection that cannot be read fails with `StorageFailureError`,
        not `InvalidCredentialsError`.
        """
        loaded = self._load_users()
        if isinstance(loaded, Err):
            return loaded
        normalized = email.lower()
        for user in loaded.value.items:
            if user.email.lower() == normalized and user.password == password:
                return Ok(user)
        logger.debug("Authentication failed for a login attempt")
        return Err(errors.InvalidCredentialsError())

    def get_user(self, user_id: str | None) -> User | None:
        """Return the user with `user_id`, or None."""
        if not user_id:
            return None
        return next((u for u in self.list_users() if u.id == user_id), None)

    def list_users(self) -> list[User]:
        """Return all users in registration order (empty on read failure)."""
        loaded = self._load_users()
        return loaded.value.items if isinstance(loaded, Ok) else []

    def submitter_label(self, owner_id: str | None) -> str:
        """Return "Submitted by <name>" where name is the email's local part."""
        if not owner_id or owner_id.startswith("shared_"):
            return ANONYMOUS_LABEL
        user = self.get_user(owner_id)
        if user is None or not user.email:
            return ANONYMOUS_LABEL
        username = user.email.split("@")[0] or "Anonymous"
        return f"Submitted by {username}"

    # --------------------------------------------------------------------- #
    # Tests: creation and queries
    # --------------------------------------------------------------------- #

    def create_test(
        self, title: str, image_a: str, image_b: str, owner_id: str
    ) -> Result[ABTest]:
        """Create a test owned by `owner_id` with trimmed fields.

        No field validation happens here; that is the form validator's job.
        The only possible failure is a `StorageFailureError`.
        """
        test = ABTest(
            id=self.id_generator.new_id(),
            user_id=owner_id,
            title=title.strip(),
            image_a=image_a.strip(),
            image_b=image_b.strip(),
        )
        return self.insert_test(test)

    def insert_test(self, test: ABTest) -> Result[ABTest]:
        """Append a fully built test to the collection as-is."""
        loaded = self._load_tests()
        if isinstance(loaded, Err):
            return loaded
        collection = loaded.value
        collection.items.append(test)
        if not self._save_tests(collection):
            return Err(self.storage.failure())
        logger.info("Created test %s owned by %s", test.id, test.user_id)
        return Ok(test)

    def all_tests(self) -> list[ABTest]:
        """Return every stored test, deleted ones included, in insertion order."""
        loaded = self._load_tests()
        return loaded.value.items if isinstance(loaded, Ok) else []

    def list_visible_tests(self) -> list[ABTest]:
        """Return tests that are not soft-deleted, in insertion order."""
        return [t for t in self.all_tests() if not t.deleted]

    def list_owned_tests(
        self, owner_id: str, include_deleted: bool = False
    ) -> list[ABTest]:
        """Return the owner's tests; soft-deleted ones only if `include_deleted`."""
        return [
            t
            for t in self.all_tests()
            if t.user_id == owner_id and (include_deleted or not t.deleted)
        ]

    def list_deleted_tests(self, owner_id: str) -> list[ABTest]:
        """Return the owner's soft-deleted tests (the trash)."""
        return [t for t in self.all_tests() if t.user_id == owner_id and t.deleted]

    def count_deleted_tests(self, owner_id: str) -> int:
        return len(self.list_deleted_tests(owner_id))

    def get_test(self, test_id: str) -> ABTest | None:
        """Return the test with `test_id`, deleted or not, or None."""
        return next((t for t in self.all_tests() if t.id == test_id), None)

    def find_test_by_content(
        self, title: str, image_a: str, image_b: str
    ) -> ABTest | None:
        """Return the first test (deleted or not) with these exact fields."""
        return next(
            (t for t in self.all_tests() if t.same_content(title, image_a, image_b)),
            None,
        )

    # --------------------------------------------------------------------- #
    # Tests: votes
    # --------------------------------------------------------------------- #

    def vote(self, test_id: str, voter_id: str, option: Any) -> Result[None]:
        """Record `voter_id`'s vote on a test. Votes can never be changed."""
        if (choice := VoteOption.parse(option)) is None:
            return Err(errors.InvalidVoteOptionError(option))

        loaded = self._load_tests()
        if isinstance(loaded, Err):
            return loaded
        collection = loaded.value
        tests = collection.items

        index = self._index_of(tests, test_id)
        if index is None:
            return Err(errors.TestNotFoundError(test_id))
        test = tests[index]
        if (existing := test.votes.get(voter_id)) is not None:
            return Err(errors.AlreadyVotedError(test_id, voter_id, existing.value))

        tests[index] = replace(test, votes={**test.votes, voter_id: choice})
        if not self._save_tests(collection):
            return Err(self.storage.failure())
        logger.info("Recorded vote %s on test %s", choice.value, test_id)
        return Ok(None)

    def has_voted(self, test_id: str, voter_id: str) -> bool:
        test = self.get_test(test_id)
        return test is not None and voter_id in test.votes

    @staticmethod
    def vote_tally(test: ABTest) -> VoteTally:
        """Count votes per option (pure projection)."""
        return vote_tally(test)

    # --------------------------------------------------------------------- #
    # Tests: owner-only lifecycle
    # --------------------------------------------------------------------- #

    def soft_delete(self, test_id: str, requester_id: str) -> Result[None]:
        """Hide a test from listings; the owner can restore it later."""
        return self._owner_update(
            test_id,
            requester_id,
            "delete",
            lambda t: replace(t, deleted=True, deleted_at=self.clock()),
        )

    def restore(self, test_id: str, requester_id: str) -> Result[None]:
        """Undo a soft delete, clearing both delete markers."""
        return self._owner_update(
            test_id,
            requester_id,
            "restore",
            lambda t: replace(t, deleted=False, deleted_at=None),
        )

    def purge(self, test_id: str, requester_id: str) -> Result[None]:
        """Remove a test from the collection for good."""
        return self._owner_update(test_id, requester_id, "delete", lambda t: None)

    def _owner_update(
        self,
        test_id: str,
        requester_id: str,
        action: str,
        change: Callable[[ABTest], ABTest | None],
    ) -> Result[None]:
        loaded = self._load_tests()
        if isinstance(loaded, Err):
            return loaded
        collection = loaded.value
        tests = collection.items

        index = self._index_of(tests, test_id)
        if index is None:
            return Err(errors.TestNotFoundError(test_id))
        if tests[index].user_id != requester_id:
            logger.warning(
                "User %s tried to %s test %s they do not own",
                requester_id,
                action,
                test_id,
            )
            return Err(errors.NotOwnerError(test_id, requester_id, action))

        if (updated := change(tests[index])) is None:
            del tests[index]
        else:
            tests[index] = updated
        if not self._save_tests(collection):
            return Err(self.storage.failure())
        logger.info("%s test %s", "Purged" if updated is None else "Updated", test_id)
        return Ok(None)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    @staticmethod
    def _index_of(tests: list[ABTest], test_id: str) -> int | None:
        return next((i for i, t in enumerate(tests) if t.id == test_id), None)

    def _load(self, key: str) -> Result[list[Any]]:
        raw = self.storage.read(key, [])
        if self.storage.last_failure is not None:
            return Err(self.storage.last_failure)
        if not isinstance(raw, list):
            logger.warning("Refusing %r: expected a list, got %s", key, type(raw).__name__)
            return Err(
                errors.StorageFailureError(
                    errors.StorageFailureKind.OTHER,
                    self.storage.key_for(key),
                    detail=f"expected a list, got {type(raw).__name__}",
                )
            )
        return Ok(raw)

    def _load_collection(
        self, key: str, from_record: Callable[[Any], M]
    ) -> Result[_Collection[M]]:
        loaded = self._load(key)
        if isinstance(loaded, Err):
            return loaded
        collection: _Collection[M] = _Collection([])
        for record in loaded.value:
            try:
                collection.items.append(from_record(record))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Keeping unreadable %s record as stored: %s", key, e)
                collection.unreadable.append(record)
        return Ok(collection)

    def _load_users(self) -> Result[_Collection[User]]:
        return self._load_collection(USERS_KEY, User.from_record)

    def _load_tests(self) -> Result[_Collection[ABTest]]:
        return self._load_collection(TESTS_KEY, ABTest.from_record)

    def _save_users(self, users: _Collection[User]) -> bool:
        return self.storage.write(USERS_KEY, users.to_records())

    def _save_tests(self, tests: _Collection[ABTest]) -> bool:
        return self.storage.write(TESTS_KEY, tests.to_records())
