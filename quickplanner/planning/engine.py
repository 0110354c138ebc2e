"""
Meal Recommendation Engine

Picks a dinner recipe for each day based on how much time the day's
calendar leaves for cooking.

Recipes are split into three buckets by total time (quick <= 30,
medium 31-60, long > 60). Each day gets an ordered preference of
buckets; the first non-empty one wins and a recipe is drawn from it
with the injected selector.

  early cooking / busy night   quick -> medium -> long
  >= 60 minutes available      long -> medium -> quick
  30-59 minutes available      medium -> quick
  < 30 minutes available       quick

DESIGN DECISION: Randomness is injected.
The default selector is random.choice; tests and reproducible runs
pass `seeded_selector(seed)` or any function picking from a sequence.

Only recipes tagged as dinner are ever assigned. An empty pool is not
an error: the affected days stay unassigned.
"""

import random
from typing import Callable, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from quickplanner.config import PlannerSettings, get_settings
from quickplanner.models.recipe import MealBucket, Recipe
from quickplanner.models.schedule import (
    BUSY_NIGHT_GAP_MINUTES,
    RELAXED_GAP_MINUTES,
    DaySchedule,
)


logger = structlog.get_logger(__name__)

RecipeSelector = Callable[[Sequence[Recipe]], Recipe]


def seeded_selector(seed: int) -> RecipeSelector:
    """A deterministic uniform selector."""
    return random.Random(seed).choice


class RecipeBuckets(BaseModel):
    """Dinner recipes split by total time."""

    quick: list[Recipe] = Field(default_factory=list)
    medium: list[Recipe] = Field(default_factory=list)
    long: list[Recipe] = Field(default_factory=list)

    def get(self, bucket: MealBucket) -> list[Recipe]:
        return getattr(self, bucket.value)

    @property
    def all(self) -> list[Recipe]:
        return self.quick + self.medium + self.long

    @property
    def is_empty(self) -> bool:
        return not (self.quick or self.medium or self.long)


class MealRecommendationEngine:
    """
    Assigns recipes to days.

    `generate` is the primary per-day policy. `recommend` is the
    quota-balanced variant used to refresh an existing plan.
    """

    def __init__(
        self,
        selector: Optional[RecipeSelector] = None,
        settings: Optional[PlannerSettings] = None,
    ):
        """
        Initialize engine.

        Args:
            selector: Picks one recipe from a non-empty sequence.
                     If None, seeded from settings or random.choice.
            settings: Planner settings (quotas). Defaults to global settings.
        """
        self._settings = settings or get_settings().planner
        if selector is None:
            if self._settings.random_seed is not None:
                selector = seeded_selector(self._settings.random_seed)
            else:
                selector = random.choice
        self._select = selector

    @staticmethod
    def bucket_recipes(recipes: Sequence[Recipe]) -> RecipeBuckets:
        """Keep dinner recipes only and partition them by total time."""
        buckets = RecipeBuckets()
        for recipe in recipes:
            if recipe.is_dinner:
                buckets.get(recipe.meal_bucket).append(recipe)
        return buckets

    @staticmethod
    def bucket_preference(schedule: DaySchedule) -> tuple[MealBucket, ...]:
        """Buckets to try for this day, best first."""
        if schedule.is_early_cooking or schedule.is_busy_night:
            return (MealBucket.QUICK, MealBucket.MEDIUM, MealBucket.LONG)

        available = schedule.available_time
        if available >= RELAXED_GAP_MINUTES:
            return (MealBucket.LONG, MealBucket.MEDIUM, MealBucket.QUICK)
        if available >= BUSY_NIGHT_GAP_MINUTES:
            return (MealBucket.MEDIUM, MealBucket.QUICK)
        return (MealBucket.QUICK,)

    def _pick(self, candidates: Sequence[Recipe]) -> Optional[Recipe]:
        if not candidates:
            return None
        return self._select(candidates)

    def choose_for_day(
        self,
        schedule: DaySchedule,
        buckets: RecipeBuckets,
    ) -> Optional[Recipe]:
        """Recipe for one day, or None if every preferred bucket is empty."""
        for bucket in self.bucket_preference(schedule):
            recipe = self._pick(buckets.get(bucket))
            if recipe is not None:
                return recipe
        return None

    def generate(
        self,
        schedules: Sequence[DaySchedule],
        recipes: Sequence[Recipe],
    ) -> list[DaySchedule]:
        """
        Assign a recipe to every day.

        Returns new schedules in the same order; the inputs are not modified.
        """
        buckets = self.bucket_recipes(recipes)
        logger.info(
            "plan_buckets",
            dinner_recipes=len(buckets.all),
            quick=len(buckets.quick),
            medium=len(buckets.medium),
            long=len(buckets.long),
        )

        planned = []
        for schedule in schedules:
            recipe = self.choose_for_day(schedule, buckets)
            logger.debug(
                "day_planned",
                date=schedule.date.isoformat(),
                early_cooking=schedule.is_early_cooking,
                busy_night=schedule.is_busy_night,
                available_time=schedule.available_time,
                recipe=recipe.name if recipe else None,
            )
            planned.append(schedule.model_copy(update={"recommended_recipe": recipe}))
        return planned

    def recommend(
        self,
        schedules: Sequence[DaySchedule],
        recipes: Sequence[Recipe],
    ) -> list[DaySchedule]:
        """
        Quota-balanced assignment.

        1. Busy days (evening events) get a quick meal.
        2. Remaining unassigned days are filled with long meals until the
           weekly minimum is met, then medium and quick meals up to their
           weekly maximum, then any dinner recipe.

        A category whose bucket is empty is passed over.
        """
        buckets = self.bucket_recipes(recipes)
        updated = [schedule.model_copy() for schedule in schedules]
        used = {bucket: 0 for bucket in MealBucket}

        for schedule in updated:
            if schedule.is_busy:
                recipe = self._pick(buckets.quick)
                if recipe is not None:
                    schedule.recommended_recipe = recipe
                    used[MealBucket.QUICK] += 1

        quotas = (
            (MealBucket.LONG, self._settings.min_long_meals_per_week),
            (MealBucket.MEDIUM, self._settings.max_medium_meals_per_week),
            (MealBucket.QUICK, self._settings.max_quick_meals_per_week),
        )

        for schedule in updated:
            if schedule.recommended_recipe is not None:
                continue

            recipe = None
            for bucket, limit in quotas:
                if used[bucket] < limit:
                    recipe = self._pick(buckets.get(bucket))
                    if recipe is not None:
                        used[bucket] += 1
                        break
            if recipe is None:
                recipe = self._pick(buckets.all)

            schedule.recommended_recipe = recipe

        return updated
