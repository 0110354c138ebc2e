"""Tests for storage, audit logging and configuration."""

import logging
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from quickplanner.audit import AuditLogger, configure_logging, create_correlation_id
from quickplanner.config import PlannerSettings, StorageSettings, validate_all_settings
from quickplanner.config.settings import AppSettings
from quickplanner.models.audit import AuditEventBuilder, AuditEventType
from quickplanner.models.grocery import GroceryItem, GroceryList
from quickplanner.models.transaction import Transaction
from quickplanner.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValuePlanStorage,
    KeyValueTransactionRepository,
    StorageError,
)


class TestJsonFileStore:
    """Tests for the on-disk document store."""

    def test_set_get_delete(self, tmp_path):
        """Test basic document operations."""
        store = JsonFileKeyValueStore(tmp_path, retry_attempts=1)
        store.set("plan", {"days": [1, 2]})

        assert (tmp_path / "plan.json").exists()
        assert store.get("plan") == {"days": [1, 2]}
        assert store.keys() == ["plan"]
        assert store.delete("plan")
        assert not store.delete("plan")
        assert store.get("plan") is None

    def test_no_temporary_files_left(self, tmp_path):
        """Test writes replace the document atomically."""
        store = JsonFileKeyValueStore(tmp_path, retry_attempts=1)
        store.set("a", [1])
        store.set("a", [2])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.json"]

    def test_invalid_key(self, tmp_path):
        """Test keys cannot escape the data directory."""
        store = JsonFileKeyValueStore(tmp_path, retry_attempts=1)
        with pytest.raises(StorageError):
            store.set("../evil", 1)

    def test_corrupt_document(self, tmp_path):
        """Test unreadable JSON raises StorageError."""
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileKeyValueStore(tmp_path, retry_attempts=1).get("broken")

    def test_transient_write_errors_are_retried(self, tmp_path, monkeypatch):
        """Test a write succeeds after a transient OSError."""
        store = JsonFileKeyValueStore(tmp_path, retry_attempts=3)
        original = store._write
        calls = []

        def flaky(path, document):
            calls.append(path)
            if len(calls) == 1:
                raise OSError("disk busy")
            original(path, document)

        monkeypatch.setattr(store, "_write", flaky)
        store.set("doc", {"ok": True})

        assert len(calls) == 2
        assert store.get("doc") == {"ok": True}

    def test_persistent_write_errors(self, tmp_path, monkeypatch):
        """Test a write that keeps failing raises StorageError."""
        store = JsonFileKeyValueStore(tmp_path, retry_attempts=2)

        def broken(path, document):
            raise OSError("read-only")

        monkeypatch.setattr(store, "_write", broken)
        with pytest.raises(StorageError):
            store.set("doc", 1)

    def test_append_only_log(self, tmp_path):
        """Test log entries are appended as JSON lines, never rewritten."""
        store = JsonFileKeyValueStore(tmp_path, retry_attempts=1)
        assert store.read_log("events") == []

        store.append("events", {"n": 1})
        first_line = (tmp_path / "events.jsonl").read_text(encoding="utf-8")
        store.append("events", {"n": 2})

        content = (tmp_path / "events.jsonl").read_text(encoding="utf-8")
        assert content.startswith(first_line)
        assert content.count("\n") == 2
        assert store.read_log("events") == [{"n": 1}, {"n": 2}]
        assert store.keys() == []

    def test_not_serializable(self):
        """Test values must be JSON compatible."""
        with pytest.raises(StorageError):
            InMemoryKeyValueStore().set("x", object())


class TestPlanStorage:
    """Tests for planner documents."""

    def test_grocery_list_round_trip(self):
        """Test grocery lists are stored and restored."""
        storage = KeyValuePlanStorage(InMemoryKeyValueStore())
        grocery_list = GroceryList(items=[GroceryItem(name="flour", recipe_names=["Bread"])])

        storage.save_grocery_list(grocery_list)

        assert storage.load_grocery_list() == grocery_list

    def test_clear_weekly_plan(self):
        """Test saving None removes the plan."""
        storage = KeyValuePlanStorage(InMemoryKeyValueStore())
        storage.save_weekly_plan(None)
        assert storage.load_weekly_plan() is None
        assert storage.load_historical_plans() == []
        assert storage.load_directory_reference() is None

    def test_corrupt_plan(self):
        """Test an invalid stored plan raises StorageError."""
        store = InMemoryKeyValueStore()
        store.set("weekly_plan", {"days": "nope"})
        with pytest.raises(StorageError):
            KeyValuePlanStorage(store).load_weekly_plan()


class TestTransactionRepository:
    """Tests for the transaction repository."""

    @pytest.fixture
    def repository(self):
        repository = KeyValueTransactionRepository(InMemoryKeyValueStore())
        repository.save(
            [
                Transaction(date=date(2025, 1, 10), amount=Decimal("-5")),
                Transaction(date=date(2025, 3, 10), amount=Decimal("-7")),
                Transaction(date=date(2025, 2, 10), amount=Decimal("9")),
            ],
            import_source="bank.csv",
        )
        return repository

    def test_fetch_newest_first(self, repository):
        """Test fetch orders by date descending."""
        assert [t.date.month for t in repository.fetch()] == [3, 2, 1]

    def test_fetch_since(self, repository):
        """Test the since filter is inclusive."""
        assert [t.date.month for t in repository.fetch(since=date(2025, 2, 10))] == [3, 2]

    def test_records_keep_source(self, repository):
        """Test import metadata is stored."""
        assert {r.import_source for r in repository.fetch_records()} == {"bank.csv"}

    def test_delete(self, repository):
        """Test single and bulk deletion."""
        target = repository.fetch()[0]
        assert repository.delete_by_id(target.id)
        assert not repository.delete_by_id(uuid4())
        assert repository.delete_all() == 2
        assert repository.fetch() == []


class FailingAuditStorage(AuditStorageInterface):
    def append_event(self, event):
        raise StorageError("audit store down")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    """Tests for the audit logger."""

    def test_logs_without_storage(self):
        """Test local-only logging succeeds."""
        assert AuditLogger().log(AuditEventBuilder.directory_selected("/recipes"))

    def test_storage_failure_is_swallowed(self):
        """Test a broken audit store never raises."""
        logger = AuditLogger(FailingAuditStorage())
        assert not logger.log(AuditEventBuilder.directory_selected("/recipes"))
        logger.log_error("boom", "details")

    def test_correlation(self):
        """Test related events can be found by correlation ID."""
        storage = KeyValueAuditStorage(InMemoryKeyValueStore())
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        logger.log_import_failed("a.csv", "bad", correlation_id=correlation_id)
        logger.log_transactions_imported("b.csv", 3, 0)

        events = storage.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in events] == [AuditEventType.IMPORT_FAILED]
        assert len(storage.get_recent_events(limit=1)) == 1

    def test_events_are_appended_to_disk(self, tmp_path):
        """Test each audit event adds one line to the audit log file."""
        storage = KeyValueAuditStorage(JsonFileKeyValueStore(tmp_path, retry_attempts=1))
        logger = AuditLogger(storage)

        for index in range(5):
            logger.log_directory_selected(f"/recipes/{index}")

        lines = (tmp_path / "audit_log.jsonl").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 5
        assert not (tmp_path / "audit_log.json").exists()
        assert len(storage.get_recent_events()) == 5


class TestSettings:
    """Tests for configuration."""

    def test_planner_defaults(self, monkeypatch):
        """Test default planner settings."""
        monkeypatch.delenv("PLANNER_DAYS_PER_PLAN", raising=False)
        settings = PlannerSettings()
        assert settings.days_per_plan == 7
        assert settings.min_long_meals_per_week == 1
        assert settings.random_seed is None

    def test_environment_override(self, monkeypatch):
        """Test values are read from prefixed environment variables."""
        monkeypatch.setenv("PLANNER_DAYS_PER_PLAN", "5")
        monkeypatch.setenv("PLANNER_RECIPE_FILE_EXTENSION", ".HTM")
        settings = PlannerSettings()
        assert settings.days_per_plan == 5
        assert settings.recipe_file_extension == "htm"

    def test_invalid_values(self, monkeypatch):
        """Test out-of-range values are rejected."""
        monkeypatch.setenv("STORAGE_WRITE_RETRY_ATTEMPTS", "0")
        with pytest.raises(ValueError):
            StorageSettings()

    def test_log_level(self):
        """Test log level names are normalized and checked."""
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(log_level="loud")

    def test_validate_all_settings(self):
        """Test the startup check reports every section."""
        results = validate_all_settings()
        assert {"planner", "imports", "storage", "app"} <= set(results)

    def test_log_level_is_applied(self, monkeypatch):
        """Test LOG_LEVEL sets the root logger level."""
        root = logging.getLogger()
        previous = root.level
        monkeypatch.setenv("LOG_LEVEL", "debug")
        try:
            configure_logging()
            assert root.level == logging.DEBUG
            configure_logging("ERROR")
            assert root.level == logging.ERROR
        finally:
            root.setLevel(previous)
