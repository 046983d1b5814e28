"""Services package."""

from chamaa.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    EntityStore,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsEntityStore,
    InMemoryAuditStorage,
    InMemoryEntityStore,
    LedgerStores,
    StorageError,
    create_memory_stores,
    create_sheets_entity_stores,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "EntityStore",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsEntityStore",
    "InMemoryAuditStorage",
    "InMemoryEntityStore",
    "LedgerStores",
    "StorageError",
    "create_memory_stores",
    "create_sheets_entity_stores",
]
