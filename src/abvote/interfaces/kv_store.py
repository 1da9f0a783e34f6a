"""Key-value store interface.

The durable store behind the storage adapter, modelled on browser
``localStorage``: string keys map to string values, a missing key reads as
``None``, and a write replaces the whole value.

Backends raise:
    - `QuotaExceededError` when a write would exceed the store's capacity.
    - `KeyValueStoreError` (base) for any other I/O or backend failure.

Backends never interpret values; serialization belongs to the caller.
"""

import abc
from collections.abc import Iterator


class KeyValueStoreError(Exception):
    """Base class for all key-value store errors."""


class QuotaExceededError(KeyValueStoreError):
    """A write was refused because the store is full.

    Attributes:
        key (str): The key being written.
        quota (int | None): Configured quota in bytes, if known.
    """

    def __init__(self, key: str, quota: int | None = None):
        detail = f" (quota {quota} bytes)" if quota is not None else ""
        super().__init__(f"Quota exceeded while writing {key!r}{detail}.")
        self.key = key
        self.quota = quota


class KeyValueStore(abc.ABC):
    """Contract for a string-to-string durable store."""

    @abc.abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under `key`, or None if absent.

        Raises:
            KeyValueStoreError: If the backend cannot be read.
        """

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value.

        Raises:
            QuotaExceededError: If the write would exceed the store's quota.
            KeyValueStoreError: For any other backend failure.
        """

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key` if present. Deleting a missing key is a no-op."""

    @abc.abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over stored keys in ascending order."""

    def usage_bytes(self) -> int:
        """Return the UTF-8 size of all stored keys and values."""
        total = 0
        for key in self.keys():
            value = self.get(key) or ""
            total += len(key.encode("utf-8")) + len(value.encode("utf-8"))
        return total

    def has_schema(self) -> bool:
        """Return True if the backend is provisioned and ready for use.

        Backends that need setup (e.g. database migrations) override this.
        """
        return True
