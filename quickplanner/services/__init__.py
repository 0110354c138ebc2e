"""Services package."""

from quickplanner.services.files import (
    AccessToken,
    DirectoryAccess,
    DirectoryAccessError,
    LocalDirectoryAccess,
)
from quickplanner.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValuePlanStorage,
    KeyValueStore,
    KeyValueTransactionRepository,
    NotFoundError,
    PlanStorageInterface,
    StorageError,
    TransactionRepository,
)

__all__ = [
    # Directory access
    "AccessToken",
    "DirectoryAccess",
    "DirectoryAccessError",
    "LocalDirectoryAccess",
    # Storage services
    "AuditStorageInterface",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
    "KeyValuePlanStorage",
    "KeyValueStore",
    "KeyValueTransactionRepository",
    "NotFoundError",
    "PlanStorageInterface",
    "StorageError",
    "TransactionRepository",
]
