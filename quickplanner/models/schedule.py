"""
Schedule Models

DaySchedule turns a day's calendar events into the signals the
recommendation engine works with:

- is_busy: anything on the calendar from 16:00 onwards
- cook_dinner_event: the first event titled "... cook dinner ..."
- is_early_cooking / is_busy_night / available_time: how much room the
  evening leaves for cooking

All of these are recomputed from the event list on every access.
The only mutable field is the recommended recipe.

WeeklyPlan and HistoricalMealPlan wrap ordered lists of DaySchedule.
"""

import datetime as dt
from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quickplanner.models.recipe import Recipe


EVENING_START_HOUR = 16
COOK_DINNER_KEYWORD = "cook dinner"

# Minutes of cooking time assumed for each kind of evening
DEFAULT_AVAILABLE_MINUTES = 120
RUSHED_AVAILABLE_MINUTES = 30

# Gap (minutes) between the end of cooking and the next event
BUSY_NIGHT_GAP_MINUTES = 30
RELAXED_GAP_MINUTES = 60


class CalendarEvent(BaseModel):
    """A calendar event, consumed read-only."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(
        default="",
        description="Event title"
    )
    start: datetime = Field(
        ...,
        description="Event start"
    )
    end: datetime = Field(
        ...,
        description="Event end"
    )
    event_id: Optional[str] = Field(
        default=None,
        description="Identifier assigned by the calendar source"
    )

    @model_validator(mode='after')
    def validate_times(self) -> 'CalendarEvent':
        if self.end < self.start:
            raise ValueError("Event end cannot be before event start")
        return self


def _minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes from earlier to later, truncated toward zero."""
    return int((later - earlier).total_seconds() / 60)


class DaySchedule(BaseModel):
    """One day of the plan: the date, its events and the chosen recipe."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique schedule ID"
    )
    date: dt.date = Field(
        ...,
        description="Calendar day"
    )
    events: list[CalendarEvent] = Field(default_factory=list)
    recommended_recipe: Optional[Recipe] = None

    @property
    def is_busy(self) -> bool:
        return any(event.start.hour >= EVENING_START_HOUR for event in self.events)

    @property
    def cook_dinner_event(self) -> Optional[CalendarEvent]:
        for event in self.events:
            if COOK_DINNER_KEYWORD in event.title.lower():
                return event
        return None

    @property
    def is_early_cooking(self) -> bool:
        cook_event = self.cook_dinner_event
        if cook_event is None:
            return False
        return cook_event.start.hour < EVENING_START_HOUR

    def _gap_after_cooking(self) -> Optional[int]:
        """Minutes between the end of cooking and the next event, if any."""
        cook_event = self.cook_dinner_event
        if cook_event is None:
            return None
        later = sorted(
            (event for event in self.events if event.start > cook_event.start),
            key=lambda event: event.start,
        )
        if not later:
            return None
        return _minutes_between(cook_event.end, later[0].start)

    @property
    def is_busy_night(self) -> bool:
        if self.cook_dinner_event is None:
            return False
        if self.is_early_cooking:
            return True
        gap = self._gap_after_cooking()
        return gap is not None and gap < BUSY_NIGHT_GAP_MINUTES

    @property
    def available_time(self) -> int:
        """Estimated minutes free for cooking."""
        if self.cook_dinner_event is None:
            return DEFAULT_AVAILABLE_MINUTES
        if self.is_early_cooking:
            return RUSHED_AVAILABLE_MINUTES

        gap = self._gap_after_cooking()
        if gap is None or gap >= RELAXED_GAP_MINUTES:
            return DEFAULT_AVAILABLE_MINUTES
        if gap < BUSY_NIGHT_GAP_MINUTES:
            return RUSHED_AVAILABLE_MINUTES
        return gap


class WeeklyPlan(BaseModel):
    """
    The current plan: an ordered run of consecutive days.

    The number of days never changes after creation; only the
    recommended recipe of individual days does.
    """

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    days: list[DaySchedule] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.days

    @property
    def start_date(self) -> Optional[date]:
        return min((day.date for day in self.days), default=None)

    @property
    def end_date(self) -> Optional[date]:
        return max((day.date for day in self.days), default=None)

    def day_for(self, day: date) -> Optional[DaySchedule]:
        for schedule in self.days:
            if schedule.date == day:
                return schedule
        return None

    def assigned_recipes(self) -> list[Recipe]:
        """Recipes of the days that have one, in day order."""
        return [
            day.recommended_recipe
            for day in self.days
            if day.recommended_recipe is not None
        ]


class HistoricalMealPlan(BaseModel):
    """An archived plan. Snapshots are never edited."""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    archived_at: datetime = Field(default_factory=datetime.utcnow)
    start_date: date
    end_date: date
    day_schedules: list[DaySchedule] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: WeeklyPlan) -> 'HistoricalMealPlan':
        """Snapshot a non-empty plan."""
        if plan.is_empty:
            raise ValueError("Cannot archive an empty plan")
        return cls(
            start_date=plan.start_date,
            end_date=plan.end_date,
            day_schedules=[day.model_copy(deep=True) for day in plan.days],
        )

    @property
    def week_label(self) -> str:
        """e.g. "Mar 3 - Mar 9"."""
        return (
            f"{self.start_date.strftime('%b')} {self.start_date.day} - "
            f"{self.end_date.strftime('%b')} {self.end_date.day}"
        )
