"""ID generators for ABVOTE users and tests."""

import threading
import uuid

from ulid import monotonic

from abvote.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator (the default).

    ULIDs sort by creation time, so ids listed in key order follow
    registration/creation order. Uses the `ulid-py` library.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            return str(monotonic.new())


class UUIDv4Generator(IdGenerator):
    """Random UUIDv4 identifiers; no ordering guarantees."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SimpleIdGenerator(IdGenerator):
    """Sequential, zero-padded ids with an optional prefix.

    Note:
        Deterministic; meant for tests and demos.
    """

    def __init__(self, length: int = 8, prefix: str = "") -> None:
        self._counter = 0
        self._length = length
        self._prefix = prefix

    def new_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}{self._counter:0{self._length}d}"


ID_SCHEMES: dict[str, type[IdGenerator]] = {
    "ulid": ULIDGenerator,
    "uuid4": UUIDv4Generator,
}


def make_id_generator(scheme: str = "ulid") -> IdGenerator:
    """Return a fresh generator for a named scheme ("ulid" or "uuid4").

    Raises:
        ValueError: If the scheme is unknown.
    """
    try:
        return ID_SCHEMES[scheme.strip().lower()]()
    except KeyError as e:
        raise ValueError(
            f"unknown id scheme {scheme!r}; expected one of {sorted(ID_SCHEMES)}"
        ) from e
