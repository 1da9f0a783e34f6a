"""Property-based tests for the core invariants."""

import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from abvote.adapters.id_generators import SimpleIdGenerator
from abvote.adapters.kv_store import MemoryKeyValueStore
from abvote.bootstrap import build_container
from abvote.domain import errors
from abvote.domain.results import Ok
from abvote.service_layer.share_codec import SharePayload, decode, encode

SETTINGS = settings(
    max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow]
)

local_parts = st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=8)
emails = st.builds(lambda name, domain: f"{name}@{domain}.org", local_parts, local_parts)
options = st.sampled_from(["A", "B"])
non_empty_text = st.text(min_size=1, max_size=40).filter(lambda s: s != "")


def _fresh_app():
    return build_container(MemoryKeyValueStore(), id_generator=SimpleIdGenerator())


@SETTINGS
@given(st.lists(emails, max_size=8))
def test_emails_stay_unique_case_insensitively(candidates):
    app = _fresh_app()
    for email in candidates:
        app.entities.register_user(email, "secret1")
        app.entities.register_user(email.upper(), "secret1")
    stored = [u.email.lower() for u in app.entities.list_users()]
    assert len(stored) == len(set(stored))
    assert set(stored) == {e.lower() for e in candidates}


@SETTINGS
@given(first=options, later=st.lists(options, min_size=1, max_size=4))
def test_first_vote_is_final(first, later):
    app = _fresh_app()
    owner = app.entities.register_user("owner@example.org", "secret1").unwrap()
    test = app.entities.create_test("Logo", "http://a", "http://b", owner.id).unwrap()
    assert app.entities.vote(test.id, "voter", first) == Ok(None)
    for option in later:
        result = app.entities.vote(test.id, "voter", option)
        assert isinstance(result.error, errors.AlreadyVotedError)
    assert app.entities.get_test(test.id).votes["voter"].value == first


@SETTINGS
@given(st.builds(SharePayload, non_empty_text, non_empty_text, non_empty_text))
def test_share_tokens_round_trip(payload):
    token = encode(payload)
    assert set(token) <= set(string.ascii_letters + string.digits + "-_")
    assert decode(token) == Ok(payload)


@SETTINGS
@given(st.text(max_size=60))
def test_decode_never_raises(token):
    result = decode(token)
    assert result.ok or isinstance(result.error, errors.MalformedTokenError)
