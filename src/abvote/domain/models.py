"""Users, A/B tests and their persisted record format.

Records are stored as JSON objects with camelCase keys (``userId``,
``imageA``, ``deletedAt``...). The dataclasses here are the in-process view;
`to_record` / `from_record` convert between the two.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

SHARED_OWNER_PREFIX = "shared_"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class VoteOption(str, Enum):
    """The two sides of an A/B test."""

    A = "A"
    B = "B"

    @classmethod
    def parse(cls, value: object) -> VoteOption | None:
        """Return the option for `value`, or None if it is not exactly "A"/"B"."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to integer milliseconds since the epoch."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int | float) -> datetime:
    """Convert milliseconds since the epoch to an aware UTC datetime.

    Raises:
        ValueError: If `value` is not finite or falls outside the datetime range.
    """
    try:
        return EPOCH + timedelta(milliseconds=value)
    except OverflowError as e:
        raise ValueError(f"epoch milliseconds out of range: {value!r}") from e


def _require_str(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        raise ValueError(f"record field {key!r} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class User:
    """A registered account.

    Attributes:
        id: Opaque identifier.
        email: Lowercased email, unique across users.
        password: Plaintext password. Insecure; kept for fidelity.
    """

    id: str
    email: str
    password: str = field(repr=False)

    def to_record(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email, "password": self.password}

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> User:
        """Build a User from its stored form.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        return cls(
            id=_require_str(record, "id"),
            email=_require_str(record, "email"),
            password=_require_str(record, "password"),
        )


@dataclass(frozen=True)
class VoteTally:
    """Vote counts for both sides of a test."""

    count_a: int
    count_b: int

    @property
    def total(self) -> int:
        return self.count_a + self.count_b


@dataclass(frozen=True)
class ABTest:  # pylint: disable=too-many-instance-attributes
    """A paired-image test.

    Attributes:
        id: Opaque identifier.
        user_id: Owner id. Anonymous imports use a ``shared_`` prefixed id.
        title: Display title.
        image_a: URL or data URL of the first image.
        image_b: URL or data URL of the second image.
        votes: Voter id to chosen option. Insert-only.
        deleted: Soft-delete flag.
        deleted_at: When the test was soft-deleted.
        shared: True when the test was created by importing a share token.
    """

    id: str
    user_id: str
    title: str
    image_a: str
    image_b: str
    votes: Mapping[str, VoteOption] = field(default_factory=dict)
    deleted: bool = False
    deleted_at: datetime | None = None
    shared: bool = False

    @property
    def is_anonymous(self) -> bool:
        return self.user_id.startswith(SHARED_OWNER_PREFIX)

    def same_content(self, title: str, image_a: str, image_b: str) -> bool:
        """Return True if the shareable fields equal the given ones."""
        return (self.title, self.image_a, self.image_b) == (title, image_a, image_b)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "imageA": self.image_a,
            "imageB": self.image_b,
            "votes": {voter: option.value for voter, option in self.votes.items()},
        }
        if self.deleted:
            record["deleted"] = True
            if self.deleted_at is not None:
                record["deletedAt"] = to_epoch_ms(self.deleted_at)
        if self.shared:
            record["shared"] = True
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ABTest:
        """Build an ABTest from its stored form.

        Raises:
            ValueError: If a field is missing, has the wrong type, or a vote
                is not "A"/"B".
        """
        raw_votes = record.get("votes") or {}
        if not isinstance(raw_votes, Mapping):
            raise ValueError(f"record field 'votes' must be an object, got {raw_votes!r}")
        votes: dict[str, VoteOption] = {}
        for voter, raw_option in raw_votes.items():
            if (option := VoteOption.parse(raw_option)) is None:
                raise ValueError(f"invalid vote {raw_option!r} by {voter!r}")
            votes[str(voter)] = option

        deleted_at = record.get("deletedAt")
        return cls(
            id=_require_str(record, "id"),
            user_id=_require_str(record, "userId"),
            title=_require_str(record, "title"),
            image_a=_require_str(record, "imageA"),
            image_b=_require_str(record, "imageB"),
            votes=votes,
            deleted=record.get("deleted") is True,
            deleted_at=(
                from_epoch_ms(deleted_at)
                if isinstance(deleted_at, (int, float))
                else None
            ),
            shared=record.get("shared") is True,
        )


def vote_tally(test: ABTest) -> VoteTally:
    """Count the votes of `test` per option."""
    options = list(test.votes.values())
    return VoteTally(
        count_a=options.count(VoteOption.A),
        count_b=options.count(VoteOption.B),
    )
