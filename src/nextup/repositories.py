from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock, RLock
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from .entities import EntitySpec
from .persisted import PersistedValue
from .storage import KeyValueStore
from .utils import matches_text

logger = logging.getLogger(__name__)

_key_locks: Dict[str, RLock] = {}
_key_locks_guard = Lock()


def _lock_for(key: str) -> RLock:
    """Return the process-wide lock serializing changes to one storage key."""
    with _key_locks_guard:
        return _key_locks.setdefault(key, RLock())


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _has_id(raw: Any, item_id: str) -> bool:
    return isinstance(raw, dict) and raw.get("id") == item_id


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing records.
    """
    completed: Optional[bool] = None
    search: Optional[str] = None


class EntityRepository:
    """
    Records of one entity kind for one user.

    The records live as a single JSON array under '<username>-<slug>'. Every
    operation re-reads that array first and every change rewrites it whole.
    Stored entries that no longer validate are skipped when reading but are
    left untouched in storage.

    Changes hold the storage key's lock from the read until the new array is
    written, so concurrent changes within the process are never dropped.
    """

    def __init__(self, store: KeyValueStore, username: str, spec: EntitySpec) -> None:
        self._spec = spec
        self._state: PersistedValue[List[Dict[str, Any]]] = PersistedValue(
            store, spec.storage_key(username), []
        )
        self._lock = _lock_for(self._state.key)

    @property
    def key(self) -> str:
        return self._state.key

    def _raw(self) -> List[Dict[str, Any]]:
        value = self._state.hydrate()
        if not isinstance(value, list):
            logger.warning("Storage key %r does not hold a list; treating it as empty", self.key)
            return []
        return value

    def _load(self, raw: Any) -> Optional[BaseModel]:
        try:
            return self._spec.model.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping invalid record under %r: %s", self.key, e)
            return None

    def all(self) -> List[Any]:
        """Return every valid record in stored order."""
        records = (self._load(raw) for raw in self._raw())
        return [r for r in records if r is not None]

    def list(self, query: Optional[ListQuery] = None) -> List[Any]:
        """
        Return records matching filters, in display order.
        - Filter by completed (entities with a completion flag only)
        - Case-insensitive substring search across the entity's text fields
        """
        q = query or ListQuery()
        items = self.all()

        if q.completed is not None and self._spec.has_completed:
            items = [r for r in items if r.completed == q.completed]

        if q.search:
            fields = self._spec.search_fields
            items = [r for r in items if matches_text(q.search, *(getattr(r, f) for f in fields))]

        return self._spec.sort(items)

    def get(self, item_id: str) -> Optional[Any]:
        for raw in self._raw():
            if _has_id(raw, item_id):
                return self._load(raw)
        return None

    def create(self, payload: BaseModel) -> Any:
        """Append a new record with a fresh identifier and return it."""
        record = self._spec.model.model_validate({**payload.model_dump(), "id": str(uuid4())})
        stored = record.to_storage()
        with self._lock:
            self._raw()
            self._state.set(lambda prev: [*_as_list(prev), stored])
        logger.debug("Created %s %s under %r", self._spec.slug, record.id, self.key)
        return record

    def _rewrite(self, item_id: str, build: Callable[[Dict[str, Any]], BaseModel]) -> Optional[Any]:
        with self._lock:
            raw = next((r for r in self._raw() if _has_id(r, item_id)), None)
            if raw is None:
                return None
            record = build(raw)
            stored = record.to_storage()
            self._state.set(
                lambda prev: [stored if _has_id(r, item_id) else r for r in _as_list(prev)]
            )
        logger.debug("Updated %s %s under %r", self._spec.slug, item_id, self.key)
        return record

    def _merge(self, raw: Dict[str, Any], changes: Dict[str, Any]) -> BaseModel:
        existing = self._spec.model.model_validate(raw)
        return self._spec.model.model_validate({**existing.model_dump(), **changes, "id": existing.id})

    def update(self, item_id: str, payload: BaseModel) -> Optional[Any]:
        """
        Apply only the fields present in payload. Return the updated record,
        or None if not found. Raises ValidationError if the merged record is invalid.
        """
        changes = payload.model_dump(exclude_unset=True)
        return self._rewrite(item_id, lambda raw: self._merge(raw, changes))

    def replace(self, item_id: str, payload: BaseModel) -> Optional[Any]:
        """Replace every field of an existing record, keeping its identifier."""
        data = payload.model_dump()
        return self._rewrite(
            item_id, lambda raw: self._spec.model.model_validate({**data, "id": item_id})
        )

    def toggle(self, item_id: str) -> Optional[Any]:
        """Flip the completion state of a record. Return None if not found."""
        toggle = self._spec.toggle
        if toggle is None:
            raise ValueError(f"{self._spec.slug} do not support toggling completion")

        def build(raw: Dict[str, Any]) -> BaseModel:
            existing = self._spec.model.model_validate(raw)
            return self._merge(raw, toggle(existing))

        return self._rewrite(item_id, build)

    def delete(self, item_id: str) -> bool:
        """Remove a record by identifier. Return True if removed, False if not found."""
        with self._lock:
            if not any(_has_id(r, item_id) for r in self._raw()):
                return False
            self._state.set(lambda prev: [r for r in _as_list(prev) if not _has_id(r, item_id)])
        logger.debug("Deleted %s %s under %r", self._spec.slug, item_id, self.key)
        return True


# PUBLIC_INTERFACE
def get_entity_repository(store: KeyValueStore, username: str, spec: EntitySpec) -> EntityRepository:
    """Return the repository for one user's records of one entity kind."""
    return EntityRepository(store, username, spec)
