"""Key-value store backends."""

from .memory import MemoryKeyValueStore
from .sqlalchemy_store import SqlAlchemyKeyValueStore

__all__ = ["MemoryKeyValueStore", "SqlAlchemyKeyValueStore"]
