from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Optional

from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class KeyValueStore(ABC):
    """Abstract contract for string key/value storage backends."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw string stored under key, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, overwriting any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""


class InMemoryStore(KeyValueStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"store values must be str, got {type(value).__name__}")
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


# PUBLIC_INTERFACE
@lru_cache
def get_store() -> KeyValueStore:
    """
    Factory returning the process-wide store configured in settings.
    - memory: InMemoryStore
    - sqlite: SQLiteStore at SQLITE_DB_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        try:
            from .db import SQLiteStore

            return SQLiteStore(settings.sqlite_db_path)
        except Exception as e:
            logger.error(
                "Could not open sqlite store at %s, using memory: %s",
                settings.sqlite_db_path,
                e,
            )
    return InMemoryStore()
