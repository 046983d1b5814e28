"""
In-memory storage implementation.

Default backend, and the fake used throughout the test-suite.
"""

from typing import Generic, Optional

from chamaa.models.audit import AuditEvent
from chamaa.services.storage.interface import (
    AuditStorageInterface,
    EntityStore,
    LedgerStores,
    T,
)


class InMemoryEntityStore(EntityStore[T], Generic[T]):
    """
    Dict-backed entity store.

    Python dicts keep insertion order and replacing a value keeps the
    original position, which is exactly the ordering contract of
    EntityStore.values().
    """

    def __init__(self):
        self._store: dict[str, T] = {}

    def get(self, key: str) -> Optional[T]:
        entity = self._store.get(key)
        if entity is None:
            return None
        return entity.model_copy(deep=True)

    def insert(self, key: str, value: T) -> None:
        self._store[key] = value.model_copy(deep=True)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def values(self) -> list[T]:
        return [entity.model_copy(deep=True) for entity in self._store.values()]

    def __len__(self) -> int:
        return len(self._store)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        """Every event in append order."""
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True


def create_memory_stores() -> LedgerStores:
    return LedgerStores(
        admins=InMemoryEntityStore(),
        groups=InMemoryEntityStore(),
        members=InMemoryEntityStore(),
        contributions=InMemoryEntityStore(),
    )
