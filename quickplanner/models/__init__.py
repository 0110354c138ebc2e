"""
Data Models Package

This package contains all Pydantic models used in QuickPlanner.
Everything that is planned, parsed or persisted conforms to these schemas.
"""

from quickplanner.models.recipe import (
    MealBucket,
    Recipe,
)
from quickplanner.models.schedule import (
    CalendarEvent,
    DaySchedule,
    HistoricalMealPlan,
    WeeklyPlan,
)
from quickplanner.models.grocery import (
    GroceryItem,
    GroceryList,
)
from quickplanner.models.transaction import (
    StoredTransaction,
    Transaction,
)
from quickplanner.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Planning models
    "CalendarEvent",
    "DaySchedule",
    "HistoricalMealPlan",
    "MealBucket",
    "Recipe",
    "WeeklyPlan",
    # Grocery models
    "GroceryItem",
    "GroceryList",
    # Finance models
    "StoredTransaction",
    "Transaction",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
