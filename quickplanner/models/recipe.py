"""
Recipe Model

A Recipe is produced by the recipe parser and never modified afterwards.
Everything the planner needs (total time, meal bucket, dinner tag) is
derived from the stored fields on access.
"""

from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


QUICK_MEAL_MAX_MINUTES = 30
MEDIUM_MEAL_MAX_MINUTES = 60
DINNER_TAG = "Dinner"
DEFAULT_DIFFICULTY = "Medium"


class MealBucket(str, Enum):
    """Recipe class by total prep + cook time."""
    QUICK = "quick"    # <= 30 minutes
    MEDIUM = "medium"  # 31-60 minutes
    LONG = "long"      # > 60 minutes


class Recipe(BaseModel):
    """
    A parsed recipe.

    Times are whole minutes. Categories keep document order but are
    compared as a set of tags.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique recipe ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Recipe name"
    )
    prep_time: int = Field(
        default=0,
        ge=0,
        description="Preparation time in minutes"
    )
    cook_time: int = Field(
        default=0,
        ge=0,
        description="Cooking time in minutes"
    )
    difficulty: str = Field(
        default=DEFAULT_DIFFICULTY,
        description="Difficulty label"
    )
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    @property
    def is_quick_meal(self) -> bool:
        return self.total_time <= QUICK_MEAL_MAX_MINUTES

    @property
    def is_medium_meal(self) -> bool:
        return QUICK_MEAL_MAX_MINUTES < self.total_time <= MEDIUM_MEAL_MAX_MINUTES

    @property
    def is_long_meal(self) -> bool:
        return self.total_time > MEDIUM_MEAL_MAX_MINUTES

    @property
    def meal_bucket(self) -> MealBucket:
        if self.is_quick_meal:
            return MealBucket.QUICK
        if self.is_medium_meal:
            return MealBucket.MEDIUM
        return MealBucket.LONG

    @property
    def is_dinner(self) -> bool:
        """True if any category tag contains "Dinner" (case-sensitive)."""
        return any(DINNER_TAG in category for category in self.categories)

    @property
    def formatted_total_time(self) -> str:
        """Human-readable total time, e.g. "45 min" or "1 hr 15 min"."""
        if self.total_time < 60:
            return f"{self.total_time} min"
        hours, minutes = divmod(self.total_time, 60)
        if minutes == 0:
            return f"{hours} hr"
        return f"{hours} hr {minutes} min"
