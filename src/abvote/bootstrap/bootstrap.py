"""Wire the storage backend and services into an application container."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from abvote import config
from abvote.adapters.db.engine import make_engine
from abvote.adapters.id_generators import make_id_generator
from abvote.adapters.kv_store import SqlAlchemyKeyValueStore
from abvote.interfaces.id_generator import IdGenerator
from abvote.interfaces.kv_store import KeyValueStore
from abvote.service_layer.entity_store import EntityStore
from abvote.service_layer.navigator import Navigator
from abvote.service_layer.session import SessionManager
from abvote.service_layer.share_codec import ShareCodec
from abvote.service_layer.storage import FailureCallback, StorageAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """The wired application."""

    store: KeyValueStore
    storage: StorageAdapter
    entities: EntityStore
    session: SessionManager
    codec: ShareCodec
    navigator: Navigator


def build_store(url: str, quota_bytes: int | None = None) -> SqlAlchemyKeyValueStore:
    """Build the durable key-value store for a SQLAlchemy URL."""
    return SqlAlchemyKeyValueStore(make_engine(url), quota_bytes=quota_bytes)


def build_container(
    store: KeyValueStore,
    *,
    namespace: str = config.DEFAULT_NAMESPACE,
    id_generator: IdGenerator | None = None,
    clock: Callable[[], datetime] | None = None,
    on_failure: FailureCallback | None = None,
) -> AppContainer:
    """Wire the services around an existing backend.

    Args:
        store: Backend holding the raw values.
        namespace: Key prefix for the persisted collections.
        id_generator: Id source for new users, tests and anonymous owners
            (defaults to ULIDs).
        clock: Aware-UTC clock for soft-delete stamps.
        on_failure: Called with every storage failure.
    """
    ids = id_generator or make_id_generator()
    storage = StorageAdapter(store, namespace=namespace, on_failure=on_failure)
    if clock is None:
        entities = EntityStore(storage, ids)
    else:
        entities = EntityStore(storage, ids, clock=clock)
    session = SessionManager(storage, entities)
    codec = ShareCodec(entities, ids)
    return AppContainer(
        store=store,
        storage=storage,
        entities=entities,
        session=session,
        codec=codec,
        navigator=Navigator(session, codec),
    )


def bootstrap(
    url: str | None = None, on_failure: FailureCallback | None = None
) -> AppContainer:
    """Build the application from the environment settings.

    Args:
        url: Store URL overriding `ABVOTE_STORE_URL`.
        on_failure: Called with every storage failure.

    Raises:
        ConfigurationError: If a setting is invalid.
    """
    store_url = url or config.get_store_url()
    store = build_store(store_url, quota_bytes=config.get_quota_bytes())
    logger.debug("Bootstrapped store at %s", store.engine.url)
    return build_container(
        store,
        namespace=config.get_namespace(),
        id_generator=make_id_generator(config.get_id_scheme()),
        on_failure=on_failure,
    )
