"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep plans and transactions in JSON files today
2. Use in-memory storage for testing
3. Swap in a database later without touching the planner

The persistence collaborator is an opaque key-value store; the
repositories on top of it only know how to (de)serialize our models.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional
from uuid import UUID

from quickplanner.models.audit import AuditEvent
from quickplanner.models.grocery import GroceryList
from quickplanner.models.schedule import HistoricalMealPlan, WeeklyPlan
from quickplanner.models.transaction import StoredTransaction, Transaction


class KeyValueStore(ABC):
    """
    Opaque persistence for JSON-compatible documents.

    Values are anything `json.dumps` accepts.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read a document.

        Returns:
            The stored value, or None if the key does not exist

        Raises:
            StorageError: If the document exists but cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Write a document, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a document.

        Returns:
            True if something was deleted
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All stored document keys, sorted."""
        pass

    @abstractmethod
    def append(self, key: str, value: Any) -> None:
        """
        Add one entry to the end of an append-only log.

        Logs live beside documents but are never rewritten.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def read_log(self, key: str) -> list[Any]:
        """
        Every entry of a log, oldest first. A missing log is empty.

        Raises:
            StorageError: If the log cannot be read
        """
        pass


class PlanStorageInterface(ABC):
    """
    Persistence of the meal planner and grocery list state.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def save_weekly_plan(self, plan: Optional[WeeklyPlan]) -> None:
        """Store the current plan (None clears it)."""
        pass

    @abstractmethod
    def load_weekly_plan(self) -> Optional[WeeklyPlan]:
        pass

    @abstractmethod
    def save_historical_plans(self, plans: list[HistoricalMealPlan]) -> None:
        """Store the archive in the given order (newest first)."""
        pass

    @abstractmethod
    def load_historical_plans(self) -> list[HistoricalMealPlan]:
        pass

    @abstractmethod
    def save_grocery_list(self, grocery_list: GroceryList) -> None:
        pass

    @abstractmethod
    def load_grocery_list(self) -> Optional[GroceryList]:
        pass

    @abstractmethod
    def save_directory_reference(self, reference: str) -> None:
        """Remember the recipe directory between sessions."""
        pass

    @abstractmethod
    def load_directory_reference(self) -> Optional[str]:
        pass


class TransactionRepository(ABC):
    """
    Abstract interface for transaction storage.

    The planner and parsers never depend on how this is implemented.
    """

    @abstractmethod
    def save(
        self,
        transactions: list[Transaction],
        import_source: str = "",
    ) -> int:
        """
        Append transactions.

        Args:
            transactions: Transactions to store
            import_source: File name they came from

        Returns:
            Number of transactions stored
        """
        pass

    @abstractmethod
    def fetch(self, since: Optional[date] = None) -> list[Transaction]:
        """
        List transactions, newest first.

        Args:
            since: Only transactions on or after this date
        """
        pass

    @abstractmethod
    def fetch_records(self) -> list[StoredTransaction]:
        """All stored records with their import metadata."""
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """
        Remove every transaction.

        Returns:
            Number of transactions removed
        """
        pass

    @abstractmethod
    def delete_by_id(self, transaction_id: UUID) -> bool:
        """
        Remove one transaction.

        Returns:
            True if it existed
        """
        pass


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

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Events of one user action in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
