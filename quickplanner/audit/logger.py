"""
Audit Logger

DESIGN DECISION: Every plan change and import is logged.
This provides:
1. A history of how each weekly plan came to be
2. Debugging capability when files or rows go missing
3. The aggregate counts behind "loaded 40 of 42 recipes"

The audit logger:
- Gracefully handles failures (a broken audit store never breaks planning)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from quickplanner.config import get_settings
from quickplanner.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from quickplanner.services.storage import AuditStorageInterface


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog through stdlib logging.

    `level` defaults to the LOG_LEVEL setting.
    """
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(level or get_settings().app.log_level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("quickplanner.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_recipes_loaded(
        self,
        directory: str,
        found: int,
        loaded: int,
        failed: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the summary of a recipe directory load."""
        self.log(AuditEventBuilder.recipes_loaded(
            directory=directory,
            found=found,
            loaded=loaded,
            failed=failed,
            correlation_id=correlation_id,
        ))

    def log_recipe_parse_failed(
        self,
        filename: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.recipe_parse_failed(
            filename=filename,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_directory_selected(
        self,
        directory: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.directory_selected(
            directory=directory,
            correlation_id=correlation_id,
        ))

    def log_plan_generated(
        self,
        plan_id: UUID,
        day_count: int,
        assigned_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.plan_generated(
            plan_id=plan_id,
            day_count=day_count,
            assigned_count=assigned_count,
            correlation_id=correlation_id,
        ))

    def log_plan_archived(
        self,
        historical_plan_id: UUID,
        week_label: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.plan_archived(
            historical_plan_id=historical_plan_id,
            week_label=week_label,
            correlation_id=correlation_id,
        ))

    def log_plan_restored(
        self,
        historical_plan_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.plan_restored(
            historical_plan_id=historical_plan_id,
            correlation_id=correlation_id,
        ))

    def log_day_reshuffled(
        self,
        plan_id: UUID,
        day: str,
        recipe_name: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.day_reshuffled(
            plan_id=plan_id,
            day=day,
            recipe_name=recipe_name,
            correlation_id=correlation_id,
        ))

    def log_day_cleared(
        self,
        plan_id: UUID,
        day: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.day_cleared(
            plan_id=plan_id,
            day=day,
            correlation_id=correlation_id,
        ))

    def log_grocery_list_generated(
        self,
        list_id: UUID,
        recipe_count: int,
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.grocery_list_generated(
            list_id=list_id,
            recipe_count=recipe_count,
            item_count=item_count,
            correlation_id=correlation_id,
        ))

    def log_grocery_items_cleared(
        self,
        list_id: UUID,
        removed: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.grocery_items_cleared(
            list_id=list_id,
            removed=removed,
            correlation_id=correlation_id,
        ))

    def log_transactions_imported(
        self,
        source: str,
        imported: int,
        skipped: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_imported(
            source=source,
            imported=imported,
            skipped=skipped,
            correlation_id=correlation_id,
        ))

    def log_transaction_rows_skipped(
        self,
        source: str,
        rows: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_rows_skipped(
            source=source,
            rows=rows,
            correlation_id=correlation_id,
        ))

    def log_transactions_deleted(
        self,
        count: int,
        transaction_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_deleted(
            count=count,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def log_import_failed(
        self,
        source: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.import_failed(
            source=source,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed read or write of persisted state."""
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a CSV import).
    Pass it through all subsequent operations.
    """
    return uuid4()
