"""Unit tests for the persisted record format of users and tests."""

from datetime import datetime, timezone

import pytest

from abvote.domain.models import (
    ABTest,
    User,
    VoteOption,
    VoteTally,
    from_epoch_ms,
    to_epoch_ms,
    vote_tally,
)

DELETED_AT = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


def _test(**overrides) -> ABTest:
    fields = {
        "id": "t1",
        "user_id": "u1",
        "title": "Logo",
        "image_a": "https://example.org/a.png",
        "image_b": "https://example.org/b.png",
    }
    fields.update(overrides)
    return ABTest(**fields)


def test_epoch_ms_round_trip_is_exact():
    ms = to_epoch_ms(DELETED_AT)
    assert ms == 1735787045678
    assert from_epoch_ms(ms) == DELETED_AT


def test_naive_datetimes_are_treated_as_utc():
    assert to_epoch_ms(DELETED_AT.replace(tzinfo=None)) == to_epoch_ms(DELETED_AT)


@pytest.mark.parametrize("value", [1e20, -1e20, float("inf"), float("nan")])
def test_from_epoch_ms_rejects_values_outside_the_datetime_range(value):
    with pytest.raises(ValueError):
        from_epoch_ms(value)


def test_from_record_rejects_out_of_range_delete_stamp():
    record = {**_test(deleted=True, deleted_at=DELETED_AT).to_record(), "deletedAt": 1e20}
    with pytest.raises(ValueError, match="out of range"):
        ABTest.from_record(record)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("A", VoteOption.A), ("B", VoteOption.B), (VoteOption.B, VoteOption.B)],
)
def test_vote_option_parse_accepts_exact_options(value, expected):
    assert VoteOption.parse(value) is expected


@pytest.mark.parametrize("value", ["a", "b", "C", "", None, 1, ["A"]])
def test_vote_option_parse_rejects_anything_else(value):
    assert VoteOption.parse(value) is None


def test_user_record_uses_stored_keys_and_hides_password_from_repr():
    user = User(id="u1", email="ada@example.org", password="hunter22")
    assert user.to_record() == {
        "id": "u1",
        "email": "ada@example.org",
        "password": "hunter22",
    }
    assert "hunter22" not in repr(user)
    assert User.from_record(user.to_record()) == user


def test_user_from_record_rejects_missing_fields():
    with pytest.raises(ValueError, match="password"):
        User.from_record({"id": "u1", "email": "ada@example.org"})


def test_fresh_test_record_has_no_optional_flags():
    record = _test().to_record()
    assert record == {
        "id": "t1",
        "userId": "u1",
        "title": "Logo",
        "imageA": "https://example.org/a.png",
        "imageB": "https://example.org/b.png",
        "votes": {},
    }


def test_deleted_shared_test_record_carries_markers():
    test = _test(
        votes={"u2": VoteOption.A},
        deleted=True,
        deleted_at=DELETED_AT,
        shared=True,
    )
    record = test.to_record()
    assert record["votes"] == {"u2": "A"}
    assert record["deleted"] is True
    assert record["deletedAt"] == 1735787045678
    assert record["shared"] is True
    assert ABTest.from_record(record) == test


def test_from_record_reads_records_without_optional_fields():
    test = ABTest.from_record(
        {
            "id": "t1",
            "userId": "u1",
            "title": "Logo",
            "imageA": "a",
            "imageB": "b",
        }
    )
    assert test.votes == {}
    assert not test.deleted
    assert test.deleted_at is None
    assert not test.shared


@pytest.mark.parametrize(
    "record",
    [
        {"id": "t1", "userId": "u1", "title": "x", "imageA": "a"},
        {"id": "t1", "userId": 7, "title": "x", "imageA": "a", "imageB": "b"},
        {
            "id": "t1",
            "userId": "u1",
            "title": "x",
            "imageA": "a",
            "imageB": "b",
            "votes": {"u2": "C"},
        },
        {
            "id": "t1",
            "userId": "u1",
            "title": "x",
            "imageA": "a",
            "imageB": "b",
            "votes": ["u2"],
        },
    ],
)
def test_from_record_rejects_malformed_records(record):
    with pytest.raises(ValueError):
        ABTest.from_record(record)


def test_anonymous_owner_and_content_match():
    test = _test(user_id="shared_abc")
    assert test.is_anonymous
    assert test.same_content("Logo", "https://example.org/a.png", "https://example.org/b.png")
    assert not test.same_content("Logo ", "https://example.org/a.png", "https://example.org/b.png")


def test_vote_tally_counts_each_side():
    test = _test(votes={"u1": VoteOption.A, "u2": VoteOption.B, "u3": VoteOption.A})
    assert vote_tally(test) == VoteTally(count_a=2, count_b=1)
    assert vote_tally(test).total == 3
    assert vote_tally(_test()) == VoteTally(0, 0)
