"""Shared fixtures for QuickPlanner tests."""

import pytest
from datetime import date, datetime, timedelta

from quickplanner.models.recipe import Recipe
from quickplanner.models.schedule import CalendarEvent, DaySchedule


def first(candidates):
    """Deterministic selector: always the first candidate."""
    return candidates[0]


def _make_recipe(
    name="Pasta",
    prep_time=10,
    cook_time=10,
    categories=("Dinner",),
    ingredients=(),
):
    return Recipe(
        name=name,
        prep_time=prep_time,
        cook_time=cook_time,
        categories=list(categories),
        ingredients=list(ingredients),
    )


def _make_event(day, hour, minute=0, duration=30, title="Meeting"):
    start = datetime(day.year, day.month, day.day, hour, minute)
    return CalendarEvent(title=title, start=start, end=start + timedelta(minutes=duration))


def _recipe_html(
    name="Chili",
    prep="15 min",
    cook="45 min",
    categories="Dinner, Mains",
    ingredients=("2 cups beans", "1 onion"),
    instructions=("Chop.", "Simmer."),
):
    ingredient_lines = "".join(
        f'<p class="line" itemprop="recipeIngredient">{line}</p>' for line in ingredients
    )
    instruction_lines = "".join(f'<p class="line">{line}</p>' for line in instructions)
    return (
        "<html><body>"
        f'<h1 itemprop="name" class="name">{name}</h1>'
        f'<b>Prep Time: </b><span itemprop="prepTime">{prep}</span>'
        f'<b>Cook Time: </b><span itemprop="cookTime">{cook}</span>'
        f'<p itemprop="recipeCategory" class="categories">{categories}</p>'
        f'<div class="ingredients text">{ingredient_lines}</div>'
        f'<div itemprop="recipeInstructions" class="directions text">{instruction_lines}</div>'
        "</body></html>"
    )


@pytest.fixture
def make_recipe():
    return _make_recipe


@pytest.fixture
def make_event():
    return _make_event


@pytest.fixture
def recipe_html():
    return _recipe_html


@pytest.fixture
def selector():
    return first


@pytest.fixture
def monday():
    return date(2025, 3, 3)


@pytest.fixture
def week(monday):
    """Seven empty day schedules starting on a Monday."""
    return [DaySchedule(date=monday + timedelta(days=offset)) for offset in range(7)]


@pytest.fixture
def recipe_pool(make_recipe):
    """One dinner recipe per bucket plus a non-dinner recipe."""
    return [
        make_recipe("Salad", 5, 10, ingredients=["1 head lettuce", "2 tbsp oil"]),
        make_recipe("Curry", 20, 25, ingredients=["2 cups rice", "1 onion"]),
        make_recipe("Roast", 20, 70, ingredients=["1 kg beef", "1 onion"]),
        make_recipe("Pancakes", 5, 10, categories=["Breakfast"]),
    ]
