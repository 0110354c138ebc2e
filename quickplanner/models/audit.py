"""
Audit Models for QuickPlanner

Every significant action in the system is logged for audit purposes.
This provides:
1. A history of how each weekly plan came to be
2. Debugging information when imports lose files or rows
3. The aggregate counts shown after a batch import

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each planner, grocery and import operation has its own event type.
    """
    # Recipe loading
    RECIPES_LOADED = "recipes_loaded"
    RECIPE_PARSE_FAILED = "recipe_parse_failed"
    DIRECTORY_SELECTED = "directory_selected"

    # Meal planning
    PLAN_GENERATED = "plan_generated"
    PLAN_ARCHIVED = "plan_archived"
    PLAN_RESTORED = "plan_restored"
    DAY_RESHUFFLED = "day_reshuffled"
    DAY_CLEARED = "day_cleared"

    # Grocery list
    GROCERY_LIST_GENERATED = "grocery_list_generated"
    GROCERY_ITEMS_CLEARED = "grocery_items_cleared"

    # Transactions
    TRANSACTIONS_IMPORTED = "transactions_imported"
    TRANSACTION_ROWS_SKIPPED = "transaction_rows_skipped"
    TRANSACTIONS_DELETED = "transactions_deleted"
    IMPORT_FAILED = "import_failed"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'plan', 'recipe', 'transaction')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.plan_generated(plan_id, 7, 5, correlation_id)
        event = AuditEventBuilder.day_cleared(plan_id, "2025-03-04")
    """

    @staticmethod
    def recipes_loaded(
        directory: str,
        found: int,
        loaded: int,
        failed: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECIPES_LOADED,
            severity=AuditSeverity.WARNING if failed else AuditSeverity.INFO,
            entity_type="recipe_directory",
            correlation_id=correlation_id,
            description=f"Loaded {loaded} of {found} recipe files",
            details={
                "directory": directory,
                "files_found": found,
                "loaded": loaded,
                "failed": failed,
            },
        )

    @staticmethod
    def recipe_parse_failed(
        filename: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECIPE_PARSE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="recipe",
            correlation_id=correlation_id,
            description=f"Could not parse recipe file: {filename}",
            error_message=error_message,
            details={"filename": filename},
        )

    @staticmethod
    def directory_selected(
        directory: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DIRECTORY_SELECTED,
            entity_type="recipe_directory",
            correlation_id=correlation_id,
            description=f"Recipe directory selected: {directory}",
            details={"directory": directory},
        )

    @staticmethod
    def plan_generated(
        plan_id: UUID,
        day_count: int,
        assigned_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_GENERATED,
            entity_type="plan",
            entity_id=plan_id,
            correlation_id=correlation_id,
            description=f"Plan generated: {assigned_count} of {day_count} days assigned",
            details={
                "day_count": day_count,
                "assigned_count": assigned_count,
            },
        )

    @staticmethod
    def plan_archived(
        historical_plan_id: UUID,
        week_label: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_ARCHIVED,
            entity_type="historical_plan",
            entity_id=historical_plan_id,
            correlation_id=correlation_id,
            description=f"Plan archived: {week_label}",
            details={"week_label": week_label},
        )

    @staticmethod
    def plan_restored(
        historical_plan_id: UUID,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_RESTORED,
            entity_type="historical_plan",
            entity_id=historical_plan_id,
            correlation_id=correlation_id,
            description="Historical plan restored as current plan",
        )

    @staticmethod
    def day_reshuffled(
        plan_id: UUID,
        day: str,
        recipe_name: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DAY_RESHUFFLED,
            entity_type="plan",
            entity_id=plan_id,
            correlation_id=correlation_id,
            description=f"Day {day} reshuffled",
            details={
                "day": day,
                "recipe": recipe_name,
            },
        )

    @staticmethod
    def day_cleared(
        plan_id: UUID,
        day: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DAY_CLEARED,
            entity_type="plan",
            entity_id=plan_id,
            correlation_id=correlation_id,
            description=f"Day {day} cleared",
            details={"day": day},
        )

    @staticmethod
    def grocery_list_generated(
        list_id: UUID,
        recipe_count: int,
        item_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROCERY_LIST_GENERATED,
            entity_type="grocery_list",
            entity_id=list_id,
            correlation_id=correlation_id,
            description=f"Grocery list generated: {item_count} items from {recipe_count} recipes",
            details={
                "recipe_count": recipe_count,
                "item_count": item_count,
            },
        )

    @staticmethod
    def grocery_items_cleared(
        list_id: UUID,
        removed: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROCERY_ITEMS_CLEARED,
            entity_type="grocery_list",
            entity_id=list_id,
            correlation_id=correlation_id,
            description=f"Removed {removed} checked grocery items",
            details={"removed": removed},
        )

    @staticmethod
    def transactions_imported(
        source: str,
        imported: int,
        skipped: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_IMPORTED,
            severity=AuditSeverity.WARNING if skipped else AuditSeverity.INFO,
            entity_type="transaction_import",
            correlation_id=correlation_id,
            description=f"Imported {imported} transactions from {source}",
            details={
                "source": source,
                "imported": imported,
                "skipped": skipped,
            },
        )

    @staticmethod
    def transaction_rows_skipped(
        source: str,
        rows: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ROWS_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction_import",
            correlation_id=correlation_id,
            description=f"Skipped {len(rows)} rows while importing {source}",
            details={
                "source": source,
                "rows": rows,
            },
        )

    @staticmethod
    def transactions_deleted(
        count: int,
        transaction_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Deleted {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def import_failed(
        source: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="transaction_import",
            correlation_id=correlation_id,
            description=f"Import failed: {source}",
            error_message=error_message,
            details={"source": source},
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            correlation_id=correlation_id,
            description=f"Storage failed: {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
