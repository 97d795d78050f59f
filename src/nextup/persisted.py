"""
Persisted values backed by a KeyValueStore.

A PersistedValue starts out holding the caller's default. hydrate() replaces it
with whatever JSON the store holds under the key, and set() writes every new
value back. Store and JSON errors never propagate: they are logged and the
last known value is kept.
"""
from __future__ import annotations

import copy
import json
import logging
from typing import Any, Callable, Generic, TypeVar, Union

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Updater = Callable[[T], T]


def dumps(value: Any) -> str:
    """Serialize value to the compact JSON text written to the store."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


# PUBLIC_INTERFACE
class PersistedValue(Generic[T]):
    """
    A value mirrored to one key of a KeyValueStore.

    Usage:
        tasks = PersistedValue(store, "alice-assignments", [])
        tasks.hydrate()
        tasks.set(lambda prev: [*prev, new_task])
    """

    def __init__(self, store: KeyValueStore, key: str, default: T) -> None:
        self._store = store
        self._key = key
        self._value: T = copy.deepcopy(default)

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> T:
        return self._value

    def hydrate(self) -> T:
        """
        Replace the current value with the stored JSON, if any.

        An absent or empty entry keeps the current value.
        """
        try:
            raw = self._store.get_item(self._key)
            if raw:
                self._value = json.loads(raw)
        except Exception as e:
            logger.error("Error reading storage key %r: %s", self._key, e)
        return self._value

    def set(self, value: Union[T, Updater[T]]) -> T:
        """
        Compute the next value, keep it, and write it to the store.

        value may be the new value itself or a callable receiving the
        previous value and returning the new one.
        """
        try:
            next_value = value(self._value) if callable(value) else value
            serialized = dumps(next_value)
            self._value = next_value
            self._store.set_item(self._key, serialized)
        except Exception as e:
            logger.error("Error setting storage key %r: %s", self._key, e)
        return self._value
