"""Meal planning package."""

from quickplanner.planning.calendar import (
    CalendarSource,
    StaticCalendarSource,
    build_week_schedules,
    fetch_week_schedules,
)
from quickplanner.planning.engine import (
    MealRecommendationEngine,
    RecipeBuckets,
    RecipeSelector,
    seeded_selector,
)
from quickplanner.planning.planner import (
    MealPlanner,
    PlanChange,
    PlanChangeKind,
    PlanListener,
    RecipeLoadSummary,
)

__all__ = [
    # Calendar
    "CalendarSource",
    "StaticCalendarSource",
    "build_week_schedules",
    "fetch_week_schedules",
    # Engine
    "MealRecommendationEngine",
    "RecipeBuckets",
    "RecipeSelector",
    "seeded_selector",
    # Planner
    "MealPlanner",
    "PlanChange",
    "PlanChangeKind",
    "PlanListener",
    "RecipeLoadSummary",
]
