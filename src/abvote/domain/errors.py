"""Domain-layer error definitions.

These are exceptions so they carry context and a readable message, but the
entity store, session and share codec *return* them inside `Err` instead of
raising them. Messages are user-facing.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from abvote.domain.models import ABTest

# ============================================================================
#                           General domain errors
# ============================================================================


class AbVoteError(Exception):
    """Base class for domain-layer errors."""


# ============================================================================
#                           Account related errors
# ============================================================================


class DuplicateEmailError(AbVoteError):
    """Raised when registering an email that is already taken (any case)."""

    def __init__(self, email: str) -> None:
        super().__init__("Email already registered")
        self.email = email


class WeakPasswordError(AbVoteError):
    """Raised when a password is shorter than the minimum length."""

    def __init__(self, min_length: int) -> None:
        super().__init__(f"Password must be at least {min_length} characters")
        self.min_length = min_length


class InvalidCredentialsError(AbVoteError):
    """Raised when no user matches the email/password pair."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


# ============================================================================
#                           Test related errors
# ============================================================================


class TestNotFoundError(AbVoteError):
    """Raised when a test id does not resolve to a stored test."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, test_id: str) -> None:
        super().__init__("Test not found")
        self.test_id = test_id


class NotOwnerError(AbVoteError):
    """Raised when someone other than the owner manages a test."""

    def __init__(self, test_id: str, requester_id: str, action: str) -> None:
        super().__init__(f"You can only {action} your own tests")
        self.test_id = test_id
        self.requester_id = requester_id
        self.action = action


class AlreadyVotedError(AbVoteError):
    """Raised when a voter votes a second time on the same test."""

    def __init__(self, test_id: str, voter_id: str, existing_option: str) -> None:
        super().__init__("You have already voted on this test")
        self.test_id = test_id
        self.voter_id = voter_id
        self.existing_option = existing_option


class InvalidVoteOptionError(AbVoteError):
    """Raised when a vote is neither "A" nor "B"."""

    def __init__(self, option: object) -> None:
        super().__init__("Invalid vote option")
        self.option = option


# ============================================================================
#                           Sharing related errors
# ============================================================================


class MalformedTokenError(AbVoteError):
    """Raised when a share token cannot be decoded into a test payload."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid test data: {reason}")
        self.reason = reason


class DuplicateTestError(AbVoteError):
    """Returned when an imported test already exists.

    Not a failure to abort on: `existing` is the record the caller already has.
    """

    def __init__(self, existing: ABTest) -> None:
        super().__init__("This test already exists")
        self.existing = existing


# ============================================================================
#                           Storage related errors
# ============================================================================


class StorageFailureKind(str, Enum):
    """Why a storage operation did not take effect."""

    QUOTA = "quota"
    OTHER = "other"


class StorageFailureError(AbVoteError):
    """Raised when the key-value store could not be read or written."""

    def __init__(self, kind: StorageFailureKind, key: str, detail: str = "") -> None:
        message = (
            "Storage is full. Please free up some space."
            if kind is StorageFailureKind.QUOTA
            else "Storage error. Please check your store settings."
        )
        super().__init__(message)
        self.kind = kind
        self.key = key
        self.detail = detail
