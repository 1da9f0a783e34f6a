"""Functional tests for ``abvote tests``."""

from __future__ import annotations

import json

import pytest

from abvote.entrypoints.cli.context import SIGN_IN_REQUIRED_MSG

IMAGE_A = "https://img.example.org/a.png"
IMAGE_B = "https://img.example.org/b.png"


@pytest.fixture
def create_test(run):
    def _create(title: str = "Logo color") -> str:
        result = run(
            "tests", "create",
            "--title", title,
            "--image-a", IMAGE_A,
            "--image-b", IMAGE_B,
        )  # fmt: skip
        assert result.exit_code == 0, result.output
        return result.output.splitlines()[0]

    return _create


@pytest.fixture
def switch_to(run):
    """Sign in as `email`, registering it first if needed."""

    def _switch(email: str) -> None:
        result = run("account", "login", "--email", email, "--password", "secret2")
        if result.exit_code != 0:
            result = run(
                "account", "register",
                "--email", email,
                "--password", "secret2",
                "--password-confirm", "secret2",
            )  # fmt: skip
        assert result.exit_code == 0, result.output

    return _switch


def test_create_requires_a_session(run):
    result = run(
        "tests", "create", "--title", "Logo", "--image-a", IMAGE_A, "--image-b", IMAGE_B
    )

    assert result.exit_code == 1
    assert SIGN_IN_REQUIRED_MSG in result.output


def test_create_validates_the_form(run, signed_in):
    result = run(
        "tests", "create", "--title", "ab", "--image-a", "nope", "--image-b", ""
    )

    assert result.exit_code == 1
    assert "Title must be at least 3 characters" in result.output
    assert "Please enter a valid URL or upload an image file" in result.output
    assert "Image B is required (URL or file)" in result.output


def test_created_test_is_listed_by_browse(run, signed_in, create_test):
    test_id = create_test()

    result = run("tests", "browse", "--json")

    assert result.exit_code == 0
    (document,) = json.loads(result.stdout)
    assert document["id"] == test_id
    assert document["title"] == "Logo color"
    assert document["imageA"] == IMAGE_A
    assert (document["votesA"], document["votesB"]) == (0, 0)
    assert document["deleted"] is False


def test_votes_are_counted_once_per_user(run, signed_in, create_test, switch_to):
    test_id = create_test()

    first = run("tests", "vote", test_id, "a")
    assert first.exit_code == 0, first.output
    assert "Voted A" in first.output

    again = run("tests", "vote", test_id, "B")
    assert again.exit_code == 1
    assert "You have already voted on this test" in again.output

    switch_to("bob@example.org")
    assert run("tests", "vote", test_id, "B").exit_code == 0

    shown = run("tests", "show", test_id, "--json")
    (document,) = json.loads(shown.stdout)
    assert (document["votesA"], document["votesB"]) == (1, 1)


def test_vote_rejects_unknown_options_and_tests(run, signed_in, create_test):
    test_id = create_test()

    bad_option = run("tests", "vote", test_id, "C")
    assert bad_option.exit_code == 1
    assert "Invalid vote option" in bad_option.output

    missing = run("tests", "vote", "no-such-id", "A")
    assert missing.exit_code == 1
    assert "Test not found" in missing.output


def test_trash_lifecycle(run, signed_in, create_test):
    test_id = create_test()

    deleted = run("tests", "delete", test_id)
    assert deleted.exit_code == 0
    assert "Test moved to trash" in deleted.output
    assert "No tests yet." in run("tests", "browse").output
    assert test_id in run("tests", "trash").output

    restored = run("tests", "restore", test_id)
    assert restored.exit_code == 0
    assert "Test restored" in restored.output
    assert test_id in run("tests", "browse").output
    assert "Trash is empty." in run("tests", "trash").output


def test_mine_can_include_deleted_tests(run, signed_in, create_test):
    kept = create_test("Kept test")
    binned = create_test("Binned test")
    run("tests", "delete", binned)

    visible = run("tests", "mine").output
    assert kept in visible
    assert binned not in visible

    everything = run("tests", "mine", "--include-deleted").output
    assert kept in everything
    assert binned in everything


def test_purge_asks_for_confirmation(run, signed_in, create_test):
    test_id = create_test()

    declined = run("tests", "purge", test_id, input="n\n")
    assert declined.exit_code == 1
    assert 'permanently delete "Logo color"' in declined.output
    assert run("tests", "show", test_id).exit_code == 0

    purged = run("tests", "purge", test_id, "--yes")
    assert purged.exit_code == 0
    assert "Test permanently deleted" in purged.output

    shown = run("tests", "show", test_id)
    assert shown.exit_code == 1
    assert "Test not found" in shown.output


def test_only_the_owner_manages_a_test(run, signed_in, create_test, switch_to):
    test_id = create_test()
    switch_to("bob@example.org")

    for command, action in (("delete", "delete"), ("restore", "restore")):
        result = run("tests", command, test_id)
        assert result.exit_code == 1
        assert f"You can only {action} your own tests" in result.output

    purge = run("tests", "purge", test_id, "-y")
    assert purge.exit_code == 1
    assert "your own tests" in purge.output
    assert test_id in run("tests", "browse").output


def test_votes_survive_the_trash(run, signed_in, create_test):
    test_id = create_test()
    run("tests", "vote", test_id, "B")
    run("tests", "delete", test_id)
    run("tests", "restore", test_id)

    shown = run("tests", "show", test_id, "--json")

    (document,) = json.loads(shown.stdout)
    assert document["votesB"] == 1
    assert document["deletedAt"] is None
