"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements JSON documents (on disk or in memory) as the backend,
but designed to be swappable.
"""

from quickplanner.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    NotFoundError,
    PlanStorageInterface,
    StorageError,
    TransactionRepository,
)
from quickplanner.services.storage.json_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValuePlanStorage,
    KeyValueTransactionRepository,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStore",
    "PlanStorageInterface",
    "TransactionRepository",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # JSON document implementation
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
    "KeyValuePlanStorage",
    "KeyValueTransactionRepository",
]
