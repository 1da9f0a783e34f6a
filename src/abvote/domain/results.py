"""Tagged results returned by entity store, session and share codec operations.

An operation either succeeds with a payload (`Ok`) or fails with exactly one
domain error (`Err`). Callers branch with `match`:

    ```py
    match store.vote(test_id, voter_id, "A"):
        case Ok():
            ...
        case Err(error=errors.AlreadyVotedError()):
            ...
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from abvote.domain.errors import AbVoteError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying the operation's payload."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the payload."""
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the domain error that explains it."""

    error: AbVoteError

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        """User-facing message of the carried error."""
        return str(self.error)

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result = Union[Ok[T], Err]
