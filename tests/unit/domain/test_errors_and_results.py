"""Unit tests for domain errors and the Ok/Err result types."""

import pytest

from abvote.domain import errors
from abvote.domain.models import ABTest
from abvote.domain.results import Err, Ok


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (errors.DuplicateEmailError("a@b.co"), "Email already registered"),
        (errors.WeakPasswordError(6), "Password must be at least 6 characters"),
        (errors.InvalidCredentialsError(), "Invalid email or password"),
        (errors.TestNotFoundError("t1"), "Test not found"),
        (errors.NotOwnerError("t1", "u2", "delete"), "You can only delete your own tests"),
        (errors.NotOwnerError("t1", "u2", "restore"), "You can only restore your own tests"),
        (errors.AlreadyVotedError("t1", "u1", "A"), "You have already voted on this test"),
        (errors.InvalidVoteOptionError("C"), "Invalid vote option"),
        (
            errors.StorageFailureError(errors.StorageFailureKind.QUOTA, "abtest_tests"),
            "Storage is full. Please free up some space.",
        ),
        (
            errors.StorageFailureError(errors.StorageFailureKind.OTHER, "abtest_tests"),
            "Storage error. Please check your store settings.",
        ),
    ],
)
def test_user_facing_messages(error, message):
    assert isinstance(error, errors.AbVoteError)
    assert str(error) == message


def test_errors_carry_their_context():
    existing = ABTest(id="t1", user_id="u1", title="x", image_a="a", image_b="b")
    duplicate = errors.DuplicateTestError(existing)
    assert duplicate.existing is existing

    voted = errors.AlreadyVotedError("t1", "u1", "B")
    assert (voted.test_id, voted.voter_id, voted.existing_option) == ("t1", "u1", "B")

    malformed = errors.MalformedTokenError("missing field 'title'")
    assert malformed.reason == "missing field 'title'"
    assert str(malformed).startswith("Invalid test data")


def test_ok_unwraps_to_its_value():
    result = Ok(42)
    assert result.ok
    assert result.unwrap() == 42


def test_err_unwrap_raises_the_carried_error():
    result = Err(errors.TestNotFoundError("t9"))
    assert not result.ok
    assert result.message == "Test not found"
    with pytest.raises(errors.TestNotFoundError) as excinfo:
        result.unwrap()
    assert excinfo.value.test_id == "t9"


def test_results_support_match_on_error_type():
    match Err(errors.AlreadyVotedError("t1", "u1", "A")):
        case Err(error=errors.AlreadyVotedError(existing_option=option)):
            assert option == "A"
        case _:  # pragma: no cover
            pytest.fail("pattern did not match")
