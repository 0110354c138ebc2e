"""
Calendar Grouping

The calendar itself is an external collaborator. This module only
defines the interface the planner needs and groups a window of
events into one DaySchedule per day.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Iterable

from quickplanner.models.schedule import CalendarEvent, DaySchedule


class CalendarSource(ABC):
    """Anything that can list calendar events in a time window."""

    @abstractmethod
    def events_between(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Events starting in [start, end)."""
        pass


class StaticCalendarSource(CalendarSource):
    """A fixed list of events."""

    def __init__(self, events: Iterable[CalendarEvent] = ()):
        self._events = list(events)

    def add_event(self, event: CalendarEvent) -> None:
        self._events.append(event)

    def events_between(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        return [event for event in self._events if start <= event.start < end]


def build_week_schedules(
    events: Iterable[CalendarEvent],
    start: datetime,
    days: int = 7,
) -> list[DaySchedule]:
    """
    One DaySchedule per calendar day from `start.date()`.

    An event belongs to the day its start falls on. Events outside
    the window are ignored. Each day's events are sorted by start.
    """
    first_day = start.date()
    by_day = {first_day + timedelta(days=offset): [] for offset in range(days)}

    for event in events:
        bucket = by_day.get(event.start.date())
        if bucket is not None:
            bucket.append(event)

    return [
        DaySchedule(date=day, events=sorted(day_events, key=lambda e: e.start))
        for day, day_events in by_day.items()
    ]


def fetch_week_schedules(
    source: CalendarSource,
    start: datetime,
    days: int = 7,
) -> list[DaySchedule]:
    """Read a window of events from `source` and group it by day."""
    window_start = datetime.combine(start.date(), datetime.min.time(), tzinfo=start.tzinfo)
    window_end = window_start + timedelta(days=days)
    events = source.events_between(window_start, window_end)
    return build_week_schedules(events, window_start, days=days)
