"""
JSON Document Storage Implementation

DESIGN DECISION: State is kept as one JSON document per key because:
1. The data is small (one plan, a short archive, one grocery list)
2. No database setup required
3. Users can inspect or back up the files directly

TRADEOFFS:
- Every write rewrites the whole document (fine at personal scale)
- The audit trail grows without bound, so it is an append-only
  `<key>.jsonl` log instead of a document
- No cross-document transactions (writes are ordered carefully instead)

Writes go to a temporary file and are moved into place, so a crash
never leaves a half-written document behind.
"""

import json
import os
import re
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from quickplanner.config import get_settings
from quickplanner.models.audit import AuditEvent
from quickplanner.models.grocery import GroceryList
from quickplanner.models.schedule import HistoricalMealPlan, WeeklyPlan
from quickplanner.models.transaction import StoredTransaction, Transaction
from quickplanner.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStore,
    PlanStorageInterface,
    StorageError,
    TransactionRepository,
)


logger = structlog.get_logger(__name__)

# Document keys
WEEKLY_PLAN_KEY = "weekly_plan"
HISTORICAL_PLANS_KEY = "historical_plans"
GROCERY_LIST_KEY = "grocery_list"
RECIPE_DIRECTORY_KEY = "recipe_directory"
TRANSACTIONS_KEY = "transactions"
AUDIT_LOG_KEY = "audit_log"

_VALID_KEY = re.compile(r"^[A-Za-z0-9_\-]+$")


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store. Values are round-tripped through JSON."""

    def __init__(self):
        self._documents: dict[str, str] = {}
        self._logs: dict[str, list[str]] = {}

    def get(self, key: str) -> Optional[Any]:
        document = self._documents.get(key)
        return None if document is None else json.loads(document)

    def set(self, key: str, value: Any) -> None:
        try:
            self._documents[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}")

    def delete(self, key: str) -> bool:
        return self._documents.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._documents)

    def append(self, key: str, value: Any) -> None:
        try:
            line = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}")
        self._logs.setdefault(key, []).append(line)

    def read_log(self, key: str) -> list[Any]:
        return [json.loads(line) for line in self._logs.get(key, [])]


class JsonFileKeyValueStore(KeyValueStore):
    """
    One `<key>.json` file per document inside `data_dir`, plus one
    `<key>.jsonl` file per append-only log.

    Writes are retried on transient OS errors.
    """

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._retry_attempts = retry_attempts or settings.write_retry_attempts

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path.name}: {e}")

    def _write(self, path: Path, document: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def set(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        try:
            document = json.dumps(value, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}")

        try:
            for attempt in self._retrying():
                with attempt:
                    self._write(path, document)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to write {path.name}: {e}")

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path.name}: {e}")

    def keys(self) -> list[str]:
        if not self._data_dir.exists():
            return []
        return sorted(path.stem for path in self._data_dir.glob("*.json"))

    def _log_path_for(self, key: str) -> Path:
        return self._path_for(key).with_suffix(".jsonl")

    def _append_line(self, path: Path, line: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def append(self, key: str, value: Any) -> None:
        """Append one JSON line to `<key>.jsonl`."""
        path = self._log_path_for(key)
        try:
            line = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}")

        try:
            for attempt in self._retrying():
                with attempt:
                    self._append_line(path, line)
        except OSError as e:
            logger.error("storage_append_failed", key=key, error=str(e))
            raise StorageError(f"Failed to append to {path.name}: {e}")

    def read_log(self, key: str) -> list[Any]:
        path = self._log_path_for(key)
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as handle:
                return [json.loads(line) for line in handle if line.strip()]
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path.name}: {e}")



class KeyValuePlanStorage(PlanStorageInterface):
    """
    Planner state on top of a KeyValueStore.

    Models are stored with `model_dump(mode="json")`.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def _validate(self, model, value, key: str):
        try:
            return model.model_validate(value)
        except ValidationError as e:
            raise StorageError(f"Stored document {key} is corrupt: {e}")

    def save_weekly_plan(self, plan: Optional[WeeklyPlan]) -> None:
        if plan is None:
            self._store.delete(WEEKLY_PLAN_KEY)
            return
        self._store.set(WEEKLY_PLAN_KEY, plan.model_dump(mode="json"))

    def load_weekly_plan(self) -> Optional[WeeklyPlan]:
        value = self._store.get(WEEKLY_PLAN_KEY)
        if value is None:
            return None
        return self._validate(WeeklyPlan, value, WEEKLY_PLAN_KEY)

    def save_historical_plans(self, plans: list[HistoricalMealPlan]) -> None:
        self._store.set(
            HISTORICAL_PLANS_KEY,
            [plan.model_dump(mode="json") for plan in plans],
        )

    def load_historical_plans(self) -> list[HistoricalMealPlan]:
        values = self._store.get(HISTORICAL_PLANS_KEY) or []
        return [
            self._validate(HistoricalMealPlan, value, HISTORICAL_PLANS_KEY)
            for value in values
        ]

    def save_grocery_list(self, grocery_list: GroceryList) -> None:
        self._store.set(GROCERY_LIST_KEY, grocery_list.model_dump(mode="json"))

    def load_grocery_list(self) -> Optional[GroceryList]:
        value = self._store.get(GROCERY_LIST_KEY)
        if value is None:
            return None
        return self._validate(GroceryList, value, GROCERY_LIST_KEY)

    def save_directory_reference(self, reference: str) -> None:
        self._store.set(RECIPE_DIRECTORY_KEY, {"path": reference})

    def load_directory_reference(self) -> Optional[str]:
        value = self._store.get(RECIPE_DIRECTORY_KEY)
        if not value:
            return None
        return value.get("path")


class KeyValueTransactionRepository(TransactionRepository):
    """Transactions kept as a single list document."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def fetch_records(self) -> list[StoredTransaction]:
        values = self._store.get(TRANSACTIONS_KEY) or []
        try:
            return [StoredTransaction.model_validate(value) for value in values]
        except ValidationError as e:
            raise StorageError(f"Stored transactions are corrupt: {e}")

    def _write_records(self, records: list[StoredTransaction]) -> None:
        self._store.set(
            TRANSACTIONS_KEY,
            [record.model_dump(mode="json") for record in records],
        )

    def save(
        self,
        transactions: list[Transaction],
        import_source: str = "",
    ) -> int:
        records = self.fetch_records()
        records.extend(
            StoredTransaction(transaction=transaction, import_source=import_source)
            for transaction in transactions
        )
        self._write_records(records)
        logger.info("transactions_saved", count=len(transactions), source=import_source)
        return len(transactions)

    def fetch(self, since: Optional[date] = None) -> list[Transaction]:
        transactions = [record.transaction for record in self.fetch_records()]
        if since is not None:
            transactions = [t for t in transactions if t.date >= since]
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def delete_all(self) -> int:
        count = len(self.fetch_records())
        self._store.delete(TRANSACTIONS_KEY)
        return count

    def delete_by_id(self, transaction_id: UUID) -> bool:
        records = self.fetch_records()
        remaining = [r for r in records if r.transaction.id != transaction_id]
        if len(remaining) == len(records):
            return False
        self._write_records(remaining)
        return True


class KeyValueAuditStorage(AuditStorageInterface):
    """Audit events kept in an append-only log, one entry per event."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def _events(self) -> list[AuditEvent]:
        values = self._store.read_log(AUDIT_LOG_KEY)
        try:
            return [AuditEvent.model_validate(value) for value in values]
        except ValidationError as e:
            raise StorageError(f"Stored audit log is corrupt: {e}")

    def append_event(self, event: AuditEvent) -> bool:
        self._store.append(AUDIT_LOG_KEY, event.model_dump(mode="json"))
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events() if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events(), key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
