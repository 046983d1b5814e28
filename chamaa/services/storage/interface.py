"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the integrity rules decoupled from storage implementation

The entity store is deliberately a flat ordered key-value map: no
foreign keys, no multi-key transactions. Referential integrity is
enforced above it, in chamaa.validation.
"""

from abc import ABC, abstractmethod
from typing import Generic, NamedTuple, Optional, TypeVar

from pydantic import BaseModel

from chamaa.models.audit import AuditEvent
from chamaa.models.ledger import Admin, Contribution, Group, Member


T = TypeVar("T", bound=BaseModel)


class EntityStore(ABC, Generic[T]):
    """
    Ordered key-value collection of one entity type.

    Implementations hand out copies: mutating a returned entity has no
    effect until it is written back with insert().
    """

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """
        Look up an entity by id.

        Returns:
            The entity if present, None otherwise

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def insert(self, key: str, value: T) -> None:
        """
        Store an entity under key.

        Upsert semantics: an existing entry is silently replaced and
        keeps its position in values().

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entity stored under key, if any."""
        pass

    @abstractmethod
    def values(self) -> list[T]:
        """
        All stored entities in insertion order.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class LedgerStores(NamedTuple):
    """The four collections a ledger operation may touch."""
    admins: EntityStore[Admin]
    groups: EntityStore[Group]
    members: EntityStore[Member]
    contributions: EntityStore[Contribution]


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
