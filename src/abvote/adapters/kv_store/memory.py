"""In-memory key-value store backend.

Keeps every key in a dict for the lifetime of the instance. Meant for tests,
examples and throwaway sessions; nothing survives the process.

Key behaviors
-------------
- **Quota**: when `quota_bytes` is set, a write whose resulting total UTF-8
  size (keys + values) exceeds it raises `QuotaExceededError` and leaves the
  previous value in place, like a browser's ``localStorage``.
- **Thread-safety**: every get/set/delete runs under an `RLock`, so each call
  is atomic. Read/modify/write sequences built on top are not.
- **Failure injection**: `fail_reads` / `fail_writes` make the store raise
  `KeyValueStoreError`, so callers' degradation paths can be exercised.

Typical usage
-------------
    store = MemoryKeyValueStore(quota_bytes=1024)
    store.set("abtest_users", "[]")
    store.get("abtest_users")  # '[]'
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

from abvote.interfaces.kv_store import (
    KeyValueStore,
    KeyValueStoreError,
    QuotaExceededError,
)

__all__ = ["MemoryKeyValueStore"]


def _size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryKeyValueStore(KeyValueStore):
    """Non-durable `KeyValueStore` backed by a dict."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._lock = threading.RLock()
        self.quota_bytes = quota_bytes
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> str | None:
        with self._lock:
            if self.fail_reads:
                raise KeyValueStoreError(f"read of {key!r} failed (injected)")
            return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            if self.fail_writes:
                raise KeyValueStoreError(f"write of {key!r} failed (injected)")
            if self.quota_bytes is not None:
                others = sum(
                    _size(k, v) for k, v in self._items.items() if k != key
                )
                if others + _size(key, value) > self.quota_bytes:
                    raise QuotaExceededError(key, self.quota_bytes)
            self._items[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        with self._lock:
            snapshot = sorted(self._items)
        return iter(snapshot)

    def usage_bytes(self) -> int:
        with self._lock:
            return sum(_size(k, v) for k, v in self._items.items())
