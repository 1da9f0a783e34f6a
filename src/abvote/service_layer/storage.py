"""Storage adapter: JSON values over a namespaced key-value store.

The only component that touches the durable store. It never raises for store
problems; instead:

- `read()` returns the caller's default,
- `write()` returns False,

and in both cases records a `StorageFailureError` (kind ``quota`` or
``other``) as `last_failure`, logs it, and hands it to the optional
`on_failure` callback so a view layer can tell the user.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from abvote.domain.errors import StorageFailureError, StorageFailureKind
from abvote.interfaces.kv_store import (
    KeyValueStore,
    KeyValueStoreError,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

FailureCallback = Callable[[StorageFailureError], None]


class StorageAdapter:
    """Namespaced JSON read/write over a `KeyValueStore`.

    Args:
        store: The backend holding the raw strings.
        namespace: Prefix joined to every logical key with ``_``.
        on_failure: Called with each failure, after it is logged.
    """

    def __init__(
        self,
        store: KeyValueStore,
        namespace: str = "abtest",
        on_failure: FailureCallback | None = None,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.on_failure = on_failure
        self.last_failure: StorageFailureError | None = None

    def key_for(self, name: str) -> str:
        """Return the namespaced store key for a logical key."""
        return f"{self.namespace}_{name}"

    def read(self, name: str, default: Any = None) -> Any:
        """Return the value stored under `name`, or `default`.

        Missing and empty values read as `default` without a failure; store
        errors and unparsable JSON read as `default` with a failure recorded.
        """
        key = self.key_for(name)
        try:
            raw = self.store.get(key)
        except KeyValueStoreError as e:
            self._fail(StorageFailureKind.OTHER, key, e)
            return default

        self.last_failure = None
        if not raw:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            self._fail(StorageFailureKind.OTHER, key, e)
            return default

    def write(self, name: str, value: Any) -> bool:
        """Serialize `value` and store it under `name`.

        Returns:
            True if the store accepted the write, False otherwise (see
            `last_failure` for why).
        """
        key = self.key_for(name)
        try:
            payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self._fail(StorageFailureKind.OTHER, key, e)
            return False

        try:
            self.store.set(key, payload)
        except QuotaExceededError as e:
            self._fail(StorageFailureKind.QUOTA, key, e)
            return False
        except KeyValueStoreError as e:
            self._fail(StorageFailureKind.OTHER, key, e)
            return False

        self.last_failure = None
        return True

    def failure(self) -> StorageFailureError:
        """Return the last failure, or a generic one if none was recorded."""
        return self.last_failure or StorageFailureError(
            StorageFailureKind.OTHER, self.namespace
        )

    def _fail(self, kind: StorageFailureKind, key: str, cause: Exception) -> None:
        failure = StorageFailureError(kind, key, detail=str(cause))
        failure.__cause__ = cause
        self.last_failure = failure
        logger.error("Storage %s failure on %r: %s", kind.value, key, cause)
        if self.on_failure is not None:
            self.on_failure(failure)
