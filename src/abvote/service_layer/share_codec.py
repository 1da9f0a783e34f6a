"""Share tokens: move a test's public fields between stores.

A token is URL-safe base64 (padding stripped) of the JSON object
``{"title": ..., "imageA": ..., "imageB": ...}``. Votes and ownership are
never included. Links embed the token in the share route fragment:

    https://example.org/#/share?data=<token>

Decoding is lenient about the transport: standard-alphabet base64 (older
links), missing padding, and ``+`` turned into spaces by query-string
decoding are all accepted.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from urllib.parse import quote

from abvote.domain import errors
from abvote.domain.models import SHARED_OWNER_PREFIX, ABTest
from abvote.domain.results import Err, Ok, Result
from abvote.interfaces.id_generator import IdGenerator
from abvote.service_layer.entity_store import EntityStore

logger = logging.getLogger(__name__)

SHARE_FIELDS = ("title", "imageA", "imageB")
SHARE_ROUTE = "#/share"
SHARE_PARAM = "data"


@dataclass(frozen=True)
class SharePayload:
    """The shareable fields of a test."""

    title: str
    image_a: str
    image_b: str

    @classmethod
    def from_test(cls, test: ABTest) -> SharePayload:
        return cls(title=test.title, image_a=test.image_a, image_b=test.image_b)


def encode(test: ABTest | SharePayload) -> str:
    """Serialize the shareable fields of `test` into a token."""
    payload = test if isinstance(test, SharePayload) else SharePayload.from_test(test)
    document = json.dumps(
        {
            "title": payload.title,
            "imageA": payload.image_a,
            "imageB": payload.image_b,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )
    token = base64.urlsafe_b64encode(document.encode("utf-8")).decode("ascii")
    return token.rstrip("=")


def decode(token: str) -> Result[SharePayload]:
    """Parse a token back into its payload.

    Fails with `MalformedTokenError` on any base64/UTF-8/JSON error (nesting
    too deep for the parser included), a non-object document, or a missing,
    empty or non-string field.
    """
    cleaned = (token or "").strip().replace(" ", "+")
    cleaned = cleaned.replace("+", "-").replace("/", "_")
    if not cleaned:
        return Err(errors.MalformedTokenError("empty token"))
    cleaned += "=" * (-len(cleaned) % 4)

    try:
        raw = base64.b64decode(cleaned, altchars=b"-_", validate=True)
        document = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, RecursionError) as e:
        return Err(errors.MalformedTokenError(f"cannot decode token ({e})"))

    if not isinstance(document, dict):
        return Err(errors.MalformedTokenError("token does not hold an object"))
    for name in SHARE_FIELDS:
        value = document.get(name)
        if not isinstance(value, str) or not value:
            return Err(errors.MalformedTokenError(f"missing field {name!r}"))

    return Ok(
        SharePayload(
            title=document["title"],
            image_a=document["imageA"],
            image_b=document["imageB"],
        )
    )


def share_link(test: ABTest, base_url: str = "") -> str:
    """Return ``<base_url>#/share?data=<token>`` for `test`."""
    return f"{base_url}{SHARE_ROUTE}?{SHARE_PARAM}={quote(encode(test), safe='')}"


class ShareCodec:
    """Encodes tests into tokens and imports tokens into the entity store."""

    def __init__(self, entities: EntityStore, id_generator: IdGenerator) -> None:
        self.entities = entities
        self.id_generator = id_generator

    encode = staticmethod(encode)
    decode = staticmethod(decode)
    share_link = staticmethod(share_link)

    def import_token(self, token: str, actor_id: str | None = None) -> Result[ABTest]:
        """Create a test from a token.

        Returns `Err(DuplicateTestError)` carrying the existing record when a
        test (deleted or not) with the same title and images is already
        stored. Otherwise the new test is owned by `actor_id`, or by a fresh
        ``shared_`` id when nobody is signed in, and starts with no votes.
        """
        decoded = decode(token)
        if isinstance(decoded, Err):
            logger.warning("Rejected share token: %s", decoded.error)
            return decoded
        payload = decoded.value

        existing = self.entities.find_test_by_content(
            payload.title, payload.image_a, payload.image_b
        )
        if existing is not None:
            logger.info("Share token matches existing test %s", existing.id)
            return Err(errors.DuplicateTestError(existing))

        owner_id = actor_id or f"{SHARED_OWNER_PREFIX}{self.id_generator.new_id()}"
        test = ABTest(
            id=self.id_generator.new_id(),
            user_id=owner_id,
            title=payload.title,
            image_a=payload.image_a,
            image_b=payload.image_b,
            votes={},
            shared=True,
        )
        return self.entities.insert_test(test)
