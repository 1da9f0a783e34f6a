"""Unit tests for the stored session pointer."""

from abvote.domain import errors
from abvote.domain.results import Err, Ok


def test_starts_signed_out(app):
    assert app.session.current_user() is None
    assert not app.session.is_authenticated()


def test_sign_up_signs_the_new_user_in(app):
    user = app.session.sign_up("Ada@example.org", "secret1").unwrap()
    assert app.session.current_user() == user
    assert app.session.session_id() == user.id


def test_failed_sign_up_leaves_session_alone(app, alice):
    app.session.login(alice.id)
    result = app.session.sign_up("ada@example.org", "123")
    assert isinstance(result.error, errors.WeakPasswordError)
    assert app.session.current_user() == alice


def test_sign_in_and_out(app, alice, memory_store):
    assert app.session.sign_in("ALICE@example.org", "secret1") == Ok(alice)
    assert memory_store.get("abtest_session") == f'"{alice.id}"'
    assert app.session.logout() == Ok(None)
    assert memory_store.get("abtest_session") == "null"
    assert app.session.current_user() is None


def test_bad_credentials_do_not_sign_in(app, alice):
    result = app.session.sign_in("alice@example.org", "wrong-password")
    assert isinstance(result, Err)
    assert not app.session.is_authenticated()


def test_login_replaces_previous_session(app, alice, bob):
    app.session.login(alice.id)
    app.session.login(bob.id)
    assert app.session.current_user() == bob


def test_stale_pointer_reads_as_signed_out(app, memory_store, caplog):
    memory_store.set("abtest_session", '"ghost"')
    with caplog.at_level("WARNING"):
        assert app.session.current_user() is None
    assert "ghost" in caplog.text


def test_non_string_pointer_is_ignored(app, memory_store):
    memory_store.set("abtest_session", "42")
    assert app.session.session_id() is None


def test_session_survives_a_new_container(app, alice, memory_store, clock):
    from abvote.adapters.id_generators import SimpleIdGenerator
    from abvote.bootstrap import build_container

    app.session.login(alice.id)
    reopened = build_container(memory_store, id_generator=SimpleIdGenerator(), clock=clock)
    assert reopened.session.current_user() == alice


def test_login_failure_is_reported(app, alice, memory_store):
    memory_store.fail_writes = True
    result = app.session.sign_in("alice@example.org", "secret1")
    assert isinstance(result.error, errors.StorageFailureError)


def test_unreadable_users_fail_sign_in_as_storage_error(app, alice, memory_store):
    memory_store.fail_reads = True
    result = app.session.sign_in("alice@example.org", "secret1")
    memory_store.fail_reads = False
    assert isinstance(result.error, errors.StorageFailureError)
    assert app.session.current_user() is None
