"""
Tests for QuickPlanner models

Test strategy:
1. Unit tests for individual models (derived properties, validation)
2. Integration tests for flows use in-memory storage
3. No real calendar or file-picker in tests
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from quickplanner.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from quickplanner.models.grocery import GroceryItem, GroceryList
from quickplanner.models.recipe import MealBucket, Recipe
from quickplanner.models.schedule import (
    CalendarEvent,
    DaySchedule,
    HistoricalMealPlan,
    WeeklyPlan,
)
from quickplanner.models.transaction import Transaction


class TestRecipeModel:
    """Tests for Recipe time classification."""

    def test_total_time(self, make_recipe):
        """Test total time is prep plus cook."""
        recipe = make_recipe(prep_time=15, cook_time=20)
        assert recipe.total_time == 35

    @pytest.mark.parametrize("prep,cook,bucket", [
        (10, 20, MealBucket.QUICK),
        (0, 30, MealBucket.QUICK),
        (15, 16, MealBucket.MEDIUM),
        (30, 30, MealBucket.MEDIUM),
        (30, 31, MealBucket.LONG),
    ])
    def test_bucket_boundaries(self, make_recipe, prep, cook, bucket):
        """Test 30 minutes is quick and 60 minutes is medium."""
        recipe = make_recipe(prep_time=prep, cook_time=cook)
        assert recipe.meal_bucket == bucket
        flags = [recipe.is_quick_meal, recipe.is_medium_meal, recipe.is_long_meal]
        assert flags.count(True) == 1

    def test_is_dinner_is_case_sensitive_substring(self, make_recipe):
        """Test the dinner tag matches inside categories but not lowercase."""
        assert make_recipe(categories=["Quick Dinners"]).is_dinner
        assert not make_recipe(categories=["dinner"]).is_dinner
        assert not make_recipe(categories=[]).is_dinner

    def test_rejects_negative_times(self):
        """Test that negative times are rejected."""
        with pytest.raises(ValueError):
            Recipe(name="Bad", prep_time=-5)

    def test_recipe_is_frozen(self, make_recipe):
        """Test recipes cannot be modified after creation."""
        recipe = make_recipe()
        with pytest.raises(ValueError):
            recipe.name = "Other"

    @pytest.mark.parametrize("prep,cook,expected", [
        (20, 25, "45 min"),
        (30, 30, "1 hr"),
        (30, 45, "1 hr 15 min"),
    ])
    def test_formatted_total_time(self, make_recipe, prep, cook, expected):
        """Test human-readable total time."""
        assert make_recipe(prep_time=prep, cook_time=cook).formatted_total_time == expected


class TestDaySchedule:
    """Tests for the busyness signals derived from events."""

    def test_cook_dinner_before_evening_is_early_cooking(self, monday, make_event):
        """Test "Cook Dinner" at 15:30 means early cooking with 30 minutes."""
        schedule = DaySchedule(
            date=monday,
            events=[make_event(monday, 15, 30, title="Cook Dinner")],
        )
        assert schedule.is_early_cooking
        assert schedule.is_busy_night
        assert schedule.available_time == 30

    def test_no_cook_event(self, monday, make_event):
        """Test a day without a cook event has the full evening."""
        schedule = DaySchedule(date=monday, events=[make_event(monday, 9)])
        assert schedule.cook_dinner_event is None
        assert not schedule.is_early_cooking
        assert not schedule.is_busy_night
        assert schedule.available_time == 120

    def test_is_busy_from_four_pm(self, monday, make_event):
        """Test events from 16:00 on make the day busy."""
        assert DaySchedule(date=monday, events=[make_event(monday, 16)]).is_busy
        assert not DaySchedule(date=monday, events=[make_event(monday, 15, 59)]).is_busy

    def test_cook_event_matched_case_insensitively(self, monday, make_event):
        """Test the title match ignores case and surrounding words."""
        cook = make_event(monday, 18, title="Time to COOK DINNER!")
        schedule = DaySchedule(date=monday, events=[cook])
        assert schedule.cook_dinner_event == cook

    @pytest.mark.parametrize("next_start_minute,busy_night,available", [
        (45, True, 30),     # 15 minute gap
        (75, False, 45),    # 45 minute gap
        (120, False, 120),  # 90 minute gap
    ])
    def test_gap_after_cooking(self, monday, make_event, next_start_minute, busy_night, available):
        """Test the gap between cooking and the next event."""
        cook = make_event(monday, 17, 0, duration=30, title="cook dinner")
        following = make_event(
            monday, 17 + next_start_minute // 60, next_start_minute % 60, title="Game"
        )
        schedule = DaySchedule(date=monday, events=[cook, following])
        assert schedule.is_busy_night == busy_night
        assert schedule.available_time == available

    def test_cook_event_without_following_event(self, monday, make_event):
        """Test cooking late with nothing after leaves the default time."""
        schedule = DaySchedule(
            date=monday,
            events=[make_event(monday, 18, title="Cook dinner")],
        )
        assert not schedule.is_busy_night
        assert schedule.available_time == 120

    def test_events_before_cooking_are_not_next(self, monday, make_event):
        """Test only events starting after the cook event count."""
        schedule = DaySchedule(
            date=monday,
            events=[
                make_event(monday, 17, 0, duration=60, title="Errands"),
                make_event(monday, 17, 30, title="Cook dinner"),
            ],
        )
        assert schedule.available_time == 120

    def test_event_end_before_start_rejected(self, monday):
        """Test CalendarEvent validates its time range."""
        start = datetime(2025, 3, 3, 10)
        with pytest.raises(ValueError):
            CalendarEvent(title="Bad", start=start, end=start - timedelta(minutes=1))


class TestPlans:
    """Tests for WeeklyPlan and HistoricalMealPlan."""

    def test_weekly_plan_dates(self, week):
        """Test derived start and end dates."""
        plan = WeeklyPlan(days=week)
        assert plan.start_date == date(2025, 3, 3)
        assert plan.end_date == date(2025, 3, 9)
        assert plan.day_for(date(2025, 3, 5)) is week[2]
        assert plan.day_for(date(2025, 4, 1)) is None

    def test_assigned_recipes_skips_empty_days(self, week, make_recipe):
        """Test only days with a recipe contribute."""
        week[1].recommended_recipe = make_recipe("Soup")
        plan = WeeklyPlan(days=week)
        assert [r.name for r in plan.assigned_recipes()] == ["Soup"]

    def test_historical_snapshot(self, week, make_recipe):
        """Test archiving copies the days and keeps the date range."""
        week[0].recommended_recipe = make_recipe("Soup")
        plan = WeeklyPlan(days=week)
        snapshot = HistoricalMealPlan.from_plan(plan)

        week[0].recommended_recipe = None
        assert snapshot.day_schedules[0].recommended_recipe.name == "Soup"
        assert snapshot.start_date == plan.start_date
        assert snapshot.end_date == plan.end_date
        assert snapshot.week_label == "Mar 3 - Mar 9"

    def test_cannot_archive_empty_plan(self):
        """Test an empty plan has no date range to archive."""
        with pytest.raises(ValueError):
            HistoricalMealPlan.from_plan(WeeklyPlan())

    def test_plan_json_round_trip(self, week, make_recipe, make_event, monday):
        """Test plans survive JSON serialization."""
        week[0].events.append(make_event(monday, 18, title="Cook dinner"))
        week[0].recommended_recipe = make_recipe("Soup")
        plan = WeeklyPlan(days=week)

        restored = WeeklyPlan.model_validate(plan.model_dump(mode="json"))
        assert restored.id == plan.id
        assert restored.days[0].recommended_recipe == plan.days[0].recommended_recipe
        assert restored.days[0].events == plan.days[0].events


class TestGroceryModels:
    """Tests for grocery items and lists."""

    def test_add_recipe_once(self):
        """Test recipe names are not duplicated."""
        item = GroceryItem(name="flour", quantity="2 cups")
        item.add_recipe("Bread")
        item.add_recipe("Bread")
        item.add_recipe("Cake")
        assert item.recipe_names == ["Bread", "Cake"]

    def test_find_item_case_insensitive(self):
        """Test lookup by name ignores case."""
        grocery_list = GroceryList(items=[GroceryItem(name="Flour")])
        assert grocery_list.find_item("FLOUR") is grocery_list.items[0]
        assert grocery_list.find_item("sugar") is None
        assert grocery_list.get_item(uuid4()) is None


class TestTransactionModel:
    """Tests for Transaction."""

    def test_sign_determines_kind(self):
        """Test negative amounts are expenses."""
        expense = Transaction(date=date(2025, 3, 1), amount=Decimal("-12.50"))
        income = Transaction(date=date(2025, 3, 1), amount=Decimal("100"))
        assert expense.is_expense and not expense.is_income
        assert income.is_income and not income.is_expense

    def test_defaults(self):
        """Test payee and account fall back to placeholders."""
        transaction = Transaction(date=date(2025, 3, 1), amount=Decimal("1"))
        assert transaction.payee == "Unknown Payee"
        assert transaction.account == "Unknown Account"

    def test_formatted_amount(self, monkeypatch):
        """Test currency formatting uses the absolute value."""
        monkeypatch.delenv("IMPORT_CURRENCY_CODE", raising=False)
        transaction = Transaction(date=date(2025, 3, 1), amount=Decimal("-1234.5"))
        assert transaction.formatted_amount() == "$1,234.50"
        assert transaction.formatted_amount("EUR") == "€1,234.50"

    def test_formatted_amount_uses_configured_currency(self, monkeypatch):
        """Test the default currency comes from IMPORT_CURRENCY_CODE."""
        monkeypatch.setenv("IMPORT_CURRENCY_CODE", "EUR")
        transaction = Transaction(date=date(2025, 3, 1), amount=Decimal("-5"))
        assert transaction.formatted_amount() == "€5.00"
        assert transaction.formatted_amount("CAD") == "$5.00"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.PLAN_GENERATED,
            description="Test event",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.DAY_CLEARED,
            description="Test",
            details={"day": "2025-03-03"},
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "day_cleared"
        assert log_dict["details"] == {"day": "2025-03-03"}

    def test_recipes_loaded_with_failures_is_warning(self):
        """Test a partial recipe load is flagged."""
        ok = AuditEventBuilder.recipes_loaded("/recipes", found=3, loaded=3, failed=0)
        partial = AuditEventBuilder.recipes_loaded("/recipes", found=3, loaded=2, failed=1)
        assert ok.severity == AuditSeverity.INFO
        assert partial.severity == AuditSeverity.WARNING
        assert partial.details["failed"] == 1

    def test_plan_generated_builder(self):
        """Test plan_generated event builder."""
        plan_id = uuid4()
        correlation_id = uuid4()
        event = AuditEventBuilder.plan_generated(
            plan_id=plan_id,
            day_count=7,
            assigned_count=5,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.PLAN_GENERATED
        assert event.entity_id == plan_id
        assert event.correlation_id == correlation_id
        assert event.details["assigned_count"] == 5
