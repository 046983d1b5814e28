"""
Storage Services Package

Provides the abstract entity-store contract and its implementations.
In-memory is the default backend; Google Sheets is the persistent one.
"""

from chamaa.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    EntityStore,
    LedgerStores,
    StorageError,
)
from chamaa.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryEntityStore,
    create_memory_stores,
)
from chamaa.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntityStore,
    create_sheets_entity_stores,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "EntityStore",
    "LedgerStores",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryEntityStore",
    "create_memory_stores",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsEntityStore",
    "create_sheets_entity_stores",
]
