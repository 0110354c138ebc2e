"""Grocery list package."""

from quickplanner.grocery.aggregator import (
    UNIT_WORDS,
    GroceryListManager,
    build_grocery_list,
    parse_ingredient,
)

__all__ = [
    "UNIT_WORDS",
    "GroceryListManager",
    "build_grocery_list",
    "parse_ingredient",
]
