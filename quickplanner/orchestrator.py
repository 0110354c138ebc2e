"""
Main Orchestrator for QuickPlanner

This module ties together all the components and defines the
end-to-end flows for:
1. Weekly planning (calendar → day schedules → recipes → plan → grocery list)
2. Transaction import (CSV bytes → transactions → repository)

DESIGN DECISION: The grocery list follows the plan through a listener.
The planner does not know the grocery list exists; the flow subscribes
the grocery manager so every plan change rebuilds the list from the
assigned recipes.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

from quickplanner.audit import AuditLogger
from quickplanner.config import get_settings
from quickplanner.finance import TransactionManager
from quickplanner.grocery import GroceryListManager
from quickplanner.models.grocery import GroceryList
from quickplanner.models.schedule import CalendarEvent, WeeklyPlan
from quickplanner.parsers import CSVDecoder
from quickplanner.planning import (
    CalendarSource,
    MealPlanner,
    PlanChange,
    PlanChangeKind,
    RecipeLoadSummary,
    build_week_schedules,
    fetch_week_schedules,
)
from quickplanner.services.files import DirectoryAccess, LocalDirectoryAccess
from quickplanner.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValuePlanStorage,
    KeyValueStore,
    KeyValueTransactionRepository,
)


logger = structlog.get_logger(__name__)


class PlanningFlow:
    """
    Orchestrates weekly planning.

    Flow:
    1. Load recipes from the recipe directory
    2. Group a week of calendar events into day schedules
    3. Generate the plan (the previous plan is archived)
    4. Rebuild the grocery list from the assigned recipes
    """

    def __init__(
        self,
        planner: Optional[MealPlanner] = None,
        grocery: Optional[GroceryListManager] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger
        self.planner = planner or MealPlanner(audit_logger=audit_logger)
        self.grocery = grocery or GroceryListManager(audit_logger=audit_logger)
        self.planner.subscribe(self._on_plan_changed)

    def _on_plan_changed(self, change: PlanChange) -> None:
        # A restored state already carries its own grocery list
        if change.kind == PlanChangeKind.LOADED and self.grocery.current_list is not None:
            return
        logger.debug("plan_changed", kind=change.kind.value, dates=len(change.affected_dates))
        self.grocery.generate_for_plan(change.plan)

    def load_state(self) -> None:
        """Restore grocery list first, then the plan and archive."""
        self.grocery.load_state()
        self.planner.load_state()

    def load_recipes(
        self,
        directory: Optional[Union[str, Path, DirectoryAccess]] = None,
    ) -> RecipeLoadSummary:
        """
        Load recipes from a directory or an access capability.

        With no argument the remembered directory is used again.
        """
        if directory is None:
            if self.planner.recipe_directory is None:
                raise ValueError("No recipe directory selected")
            directory = LocalDirectoryAccess(self.planner.recipe_directory)
        if isinstance(directory, DirectoryAccess):
            return self.planner.load_recipes_with_access(directory)
        return self.planner.load_recipes(directory)

    def plan_week(
        self,
        calendar: Union[CalendarSource, Iterable[CalendarEvent]],
        start: Optional[datetime] = None,
    ) -> WeeklyPlan:
        """
        Plan the days from `start` (default: now).

        `calendar` is either a CalendarSource or a plain list of events.
        """
        start = start or datetime.now()
        days = get_settings().planner.days_per_plan

        if isinstance(calendar, CalendarSource):
            schedules = fetch_week_schedules(calendar, start, days=days)
        else:
            schedules = build_week_schedules(calendar, start, days=days)

        return self.planner.generate_weekly_plan(schedules)

    @property
    def grocery_list(self) -> Optional[GroceryList]:
        return self.grocery.current_list


def create_app_components(
    data_dir: Optional[Union[str, Path]] = None,
    use_storage: bool = True,
) -> tuple[PlanningFlow, TransactionManager, KeyValueStore]:
    """
    Factory function to create all application components.

    Args:
        data_dir: Directory for the JSON documents.
                 If None, taken from the storage settings.
        use_storage: Whether to persist to disk.
                    Set to False for testing without storage.

    Returns:
        (planning_flow, transaction_manager, store)
    """
    store: KeyValueStore
    if use_storage:
        store = JsonFileKeyValueStore(data_dir)
    else:
        store = InMemoryKeyValueStore()

    audit_logger = AuditLogger(KeyValueAuditStorage(store))
    plan_storage = KeyValuePlanStorage(store)

    planner = MealPlanner(storage=plan_storage, audit_logger=audit_logger)
    grocery = GroceryListManager(storage=plan_storage, audit_logger=audit_logger)
    planning_flow = PlanningFlow(
        planner=planner,
        grocery=grocery,
        audit_logger=audit_logger,
    )

    transaction_manager = TransactionManager(
        repository=KeyValueTransactionRepository(store),
        decoder=CSVDecoder(),
        audit_logger=audit_logger,
    )

    logger.info("app_components_created", persistent=use_storage)
    return planning_flow, transaction_manager, store
