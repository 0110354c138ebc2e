"""
Meal Planner

Owns the planning state: the recipe pool, the current weekly plan and
the archive of past plans. Every mutation is persisted (if storage is
configured), audited, and announced to subscribed listeners.

DESIGN DECISION: State changes are pushed to listeners explicitly.
The grocery list, for example, subscribes and rebuilds itself whenever
the set of assigned recipes changes. Nothing observes the planner
implicitly.

Flow of a new plan:
1. Archive the current plan (if it has any days)
2. Run the recommendation engine over the new schedules
3. Persist plan + archive
4. Notify listeners
"""

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from quickplanner.audit import AuditLogger, create_correlation_id
from quickplanner.config import PlannerSettings, get_settings
from quickplanner.models.recipe import Recipe
from quickplanner.models.schedule import DaySchedule, HistoricalMealPlan, WeeklyPlan
from quickplanner.parsers import ParseError, RecipeParser
from quickplanner.planning.engine import MealRecommendationEngine
from quickplanner.services.files import DirectoryAccess
from quickplanner.services.storage import NotFoundError, PlanStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class PlanChangeKind(str, Enum):
    """What happened to the current plan."""
    GENERATED = "generated"
    REFRESHED = "refreshed"      # Recipes reloaded, plan re-balanced
    RESHUFFLED = "reshuffled"
    CLEARED = "cleared"
    RESTORED = "restored"        # A historical plan became current
    LOADED = "loaded"            # Restored from storage at startup


class PlanChange(BaseModel):
    """Notification sent to planner listeners."""

    kind: PlanChangeKind
    plan: WeeklyPlan
    affected_dates: list[date] = Field(default_factory=list)


PlanListener = Callable[[PlanChange], None]


class RecipeLoadSummary(BaseModel):
    """Outcome of loading a recipe directory."""

    directory: str
    files_found: int = 0
    loaded: int = 0
    failed: int = 0
    failures: dict[str, str] = Field(
        default_factory=dict,
        description="File name -> error message"
    )


class MealPlanner:
    """
    Planning state object.

    Owns recipes, the weekly plan and historical plans.
    """

    def __init__(
        self,
        engine: Optional[MealRecommendationEngine] = None,
        parser: Optional[RecipeParser] = None,
        storage: Optional[PlanStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[PlannerSettings] = None,
    ):
        self._settings = settings or get_settings().planner
        self._engine = engine or MealRecommendationEngine(settings=self._settings)
        self._parser = parser or RecipeParser()
        self._storage = storage
        self._audit_logger = audit_logger
        self._listeners: list[PlanListener] = []

        self.recipes: list[Recipe] = []
        self.weekly_plan: Optional[WeeklyPlan] = None
        self.historical_plans: list[HistoricalMealPlan] = []
        self.recipe_directory: Optional[str] = None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: PlanListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: PlanListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: PlanChangeKind, affected_dates: Sequence[date] = ()) -> None:
        if self.weekly_plan is None:
            return
        change = PlanChange(
            kind=kind,
            plan=self.weekly_plan,
            affected_dates=list(affected_dates),
        )
        for listener in list(self._listeners):
            listener(change)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load_state(self) -> None:
        """Restore plan, archive and recipe directory from storage."""
        if self._storage is None:
            return
        self.weekly_plan = self._storage.load_weekly_plan()
        self.historical_plans = self._storage.load_historical_plans()
        self.recipe_directory = self._storage.load_directory_reference()
        logger.info(
            "planner_state_loaded",
            has_plan=self.weekly_plan is not None,
            historical_plans=len(self.historical_plans),
        )
        if self.weekly_plan is not None:
            self._notify(PlanChangeKind.LOADED)

    def _persist(self, operation: str, save: Callable[[], None]) -> None:
        try:
            save()
        except StorageError as e:
            logger.error("planner_save_failed", operation=operation, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_storage_error(operation, str(e))
            raise

    def _save_plan(self) -> None:
        if self._storage is not None:
            self._persist(
                "save_weekly_plan",
                lambda: self._storage.save_weekly_plan(self.weekly_plan),
            )

    def _save_history(self) -> None:
        if self._storage is not None:
            self._persist(
                "save_historical_plans",
                lambda: self._storage.save_historical_plans(self.historical_plans),
            )

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def _recipe_files(self, files: Sequence[Path]) -> list[Path]:
        extension = f".{self._settings.recipe_file_extension}"
        return sorted(
            path for path in files
            if path.suffix.lower() == extension and not path.name.startswith(".")
        )

    def _load_recipe_files(self, directory: str, files: Sequence[Path]) -> RecipeLoadSummary:
        correlation_id = create_correlation_id()
        recipe_files = self._recipe_files(files)
        summary = RecipeLoadSummary(directory=directory, files_found=len(recipe_files))

        recipes = []
        for path in recipe_files:
            try:
                recipe = self._parser.parse_file(path)
            except ParseError as e:
                summary.failed += 1
                summary.failures[path.name] = str(e)
                logger.warning("recipe_parse_failed", file=path.name, error=str(e))
                if self._audit_logger:
                    self._audit_logger.log_recipe_parse_failed(
                        filename=path.name,
                        error_message=str(e),
                        correlation_id=correlation_id,
                    )
                continue
            recipes.append(recipe)
            summary.loaded += 1

        self.recipes = recipes
        logger.info(
            "recipes_loaded",
            directory=directory,
            files_found=summary.files_found,
            loaded=summary.loaded,
            failed=summary.failed,
        )
        if self._audit_logger:
            self._audit_logger.log_recipes_loaded(
                directory=directory,
                found=summary.files_found,
                loaded=summary.loaded,
                failed=summary.failed,
                correlation_id=correlation_id,
            )

        # Re-balance an existing plan against the new pool
        if self.weekly_plan is not None and not self.weekly_plan.is_empty:
            cleared = [
                day.model_copy(update={"recommended_recipe": None})
                for day in self.weekly_plan.days
            ]
            self.weekly_plan.days = self._engine.recommend(cleared, self.recipes)
            self._save_plan()
            self._notify(PlanChangeKind.REFRESHED, [day.date for day in self.weekly_plan.days])

        return summary

    def load_recipes(self, directory: Union[str, Path]) -> RecipeLoadSummary:
        """
        Parse every recipe document in a directory.

        A file that fails to parse is logged and counted, never raised.
        Hidden files and other extensions are ignored.
        """
        directory = Path(directory)
        try:
            files = [path for path in directory.iterdir() if path.is_file()]
        except OSError as e:
            logger.error("recipe_directory_unreadable", directory=str(directory), error=str(e))
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type="recipe_directory_unreadable",
                    error_message=str(e),
                    details={"directory": str(directory)},
                )
            return RecipeLoadSummary(directory=str(directory))
        return self._load_recipe_files(str(directory), files)

    def load_recipes_with_access(self, access: DirectoryAccess) -> RecipeLoadSummary:
        """
        Load recipes through a directory access capability and remember it.

        Raises:
            DirectoryAccessError: If access is denied or listing fails
        """
        token = access.request_directory_access()
        files = access.read_directory(token)

        self.recipe_directory = token.reference
        if self._storage is not None:
            self._storage.save_directory_reference(token.reference)
        if self._audit_logger:
            self._audit_logger.log_directory_selected(token.reference)

        return self._load_recipe_files(token.reference, files)

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def archive_current_plan(self) -> Optional[HistoricalMealPlan]:
        """
        Move a snapshot of the current plan into the archive.

        The archive stays sorted newest first. Returns None if there
        is nothing to archive.
        """
        if self.weekly_plan is None or self.weekly_plan.is_empty:
            return None

        snapshot = HistoricalMealPlan.from_plan(self.weekly_plan)
        self.historical_plans.append(snapshot)
        self.historical_plans.sort(key=lambda plan: plan.start_date, reverse=True)
        self._save_history()

        logger.info("plan_archived", week=snapshot.week_label)
        if self._audit_logger:
            self._audit_logger.log_plan_archived(snapshot.id, snapshot.week_label)
        return snapshot

    def generate_weekly_plan(self, schedules: Sequence[DaySchedule]) -> WeeklyPlan:
        """
        Build a new plan from day schedules, archiving the current one first.

        The new plan has exactly one day per schedule given.
        """
        logger.info("generating_weekly_plan", days=len(schedules), recipes=len(self.recipes))
        self.archive_current_plan()

        days = self._engine.generate(schedules, self.recipes)
        self.weekly_plan = WeeklyPlan(days=days)
        self._save_plan()

        assigned = len(self.weekly_plan.assigned_recipes())
        logger.info("weekly_plan_generated", days=len(days), assigned=assigned)
        if self._audit_logger:
            self._audit_logger.log_plan_generated(
                plan_id=self.weekly_plan.id,
                day_count=len(days),
                assigned_count=assigned,
            )

        self._notify(PlanChangeKind.GENERATED, [day.date for day in days])
        return self.weekly_plan

    def get_plan_for_day(self, day: date) -> Optional[DaySchedule]:
        if self.weekly_plan is None:
            return None
        return self.weekly_plan.day_for(day)

    def reshuffle_day(self, day: date) -> Optional[DaySchedule]:
        """
        Draw a new recipe for one day using the same rules as `generate`.

        Other days are untouched. Unknown dates are ignored (returns None).
        """
        schedule = self.get_plan_for_day(day)
        if schedule is None:
            return None

        buckets = self._engine.bucket_recipes(self.recipes)
        schedule.recommended_recipe = self._engine.choose_for_day(schedule, buckets)
        self._save_plan()

        recipe_name = schedule.recommended_recipe.name if schedule.recommended_recipe else None
        logger.info("day_reshuffled", date=day.isoformat(), recipe=recipe_name)
        if self._audit_logger:
            self._audit_logger.log_day_reshuffled(self.weekly_plan.id, day.isoformat(), recipe_name)

        self._notify(PlanChangeKind.RESHUFFLED, [day])
        return schedule

    def clear_day(self, day: date) -> Optional[DaySchedule]:
        """Remove the recipe of one day. Unknown dates are ignored."""
        schedule = self.get_plan_for_day(day)
        if schedule is None:
            return None

        schedule.recommended_recipe = None
        self._save_plan()

        logger.info("day_cleared", date=day.isoformat())
        if self._audit_logger:
            self._audit_logger.log_day_cleared(self.weekly_plan.id, day.isoformat())

        self._notify(PlanChangeKind.CLEARED, [day])
        return schedule

    def load_historical_plan(self, plan_id: UUID) -> WeeklyPlan:
        """
        Make a copy of an archived plan the current plan.

        The archive itself is unchanged.

        Raises:
            NotFoundError: If no archived plan has this ID
        """
        for historical in self.historical_plans:
            if historical.id == plan_id:
                break
        else:
            raise NotFoundError(f"Historical plan not found: {plan_id}")

        self.weekly_plan = WeeklyPlan(
            days=[day.model_copy(deep=True) for day in historical.day_schedules]
        )
        self._save_plan()

        if self._audit_logger:
            self._audit_logger.log_plan_restored(historical.id)

        self._notify(PlanChangeKind.RESTORED, [day.date for day in self.weekly_plan.days])
        return self.weekly_plan
