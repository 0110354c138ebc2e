"""
Grocery List Aggregator

Turns the recipes of a plan into one shopping list.

Ingredient lines are free text ("2 cups flour", "<strong>1</strong> onion").
Each line is split into a quantity and a name; items are merged by name,
case-insensitively. The first recipe that needs an item decides its
quantity. Quantities are not summed or converted.

DESIGN DECISION: Unit words are matched as whole tokens.
"2 cups flour" gives ("2 cups", "flour"). Matching units as prefixes
of the line would cut "cup" out of "cups" and leave "s flour" behind.
"""

from typing import Optional, Sequence
from uuid import UUID

import structlog

from quickplanner.audit import AuditLogger, create_correlation_id
from quickplanner.models.grocery import GroceryItem, GroceryList
from quickplanner.models.recipe import Recipe
from quickplanner.models.schedule import WeeklyPlan
from quickplanner.services.storage import PlanStorageInterface


logger = structlog.get_logger(__name__)

UNIT_WORDS = frozenset({
    "cup", "cups",
    "tablespoon", "tablespoons", "tbsp",
    "teaspoon", "teaspoons", "tsp",
    "ounce", "ounces", "oz",
    "pound", "pounds", "lb", "lbs",
    "gram", "grams", "g",
    "kilogram", "kilograms", "kg",
    "ml", "milliliter", "milliliters",
    "l", "liter", "liters",
})

_MARKUP = ("<strong>", "</strong>")


def parse_ingredient(line: str) -> tuple[str, str]:
    """
    Split an ingredient line into (name, quantity).

    >>> parse_ingredient("2 cups flour")
    ('flour', '2 cups')
    >>> parse_ingredient("3 eggs")
    ('eggs', '3')
    >>> parse_ingredient("salt")
    ('salt', '')
    """
    for tag in _MARKUP:
        line = line.replace(tag, "")
    line = line.strip()

    tokens = line.split()
    if len(tokens) < 2:
        return line, ""

    amount = tokens[0]
    unit = tokens[1].lower()
    if len(tokens) > 2 and unit in UNIT_WORDS:
        return " ".join(tokens[2:]), f"{amount} {unit}"
    return " ".join(tokens[1:]), amount


def build_grocery_list(recipes: Sequence[Recipe]) -> GroceryList:
    """
    Merge the ingredients of `recipes` into a new list.

    Items are unique by lower-cased name and sorted by name. A recipe
    appearing twice only adds its name to an item once.
    """
    items: dict[str, GroceryItem] = {}

    for recipe in recipes:
        for line in recipe.ingredients:
            name, quantity = parse_ingredient(line)
            if not name:
                continue
            key = name.lower()
            item = items.get(key)
            if item is None:
                item = GroceryItem(name=name, quantity=quantity)
                items[key] = item
            item.add_recipe(recipe.name)

    return GroceryList(items=sorted(items.values(), key=lambda item: item.key))


class GroceryListManager:
    """
    Holds the current grocery list and keeps it persisted.

    Regenerating the list replaces every item, so checked state does
    not survive a new plan.
    """

    def __init__(
        self,
        storage: Optional[PlanStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self.current_list: Optional[GroceryList] = None

    def load_state(self) -> None:
        if self._storage is not None:
            self.current_list = self._storage.load_grocery_list()

    def _save(self) -> None:
        if self._storage is not None and self.current_list is not None:
            self._storage.save_grocery_list(self.current_list)

    def generate_list_from_recipes(self, recipes: Sequence[Recipe]) -> GroceryList:
        self.current_list = build_grocery_list(recipes)
        self._save()

        logger.info(
            "grocery_list_generated",
            recipes=len(recipes),
            items=len(self.current_list.items),
        )
        if self._audit_logger:
            self._audit_logger.log_grocery_list_generated(
                list_id=self.current_list.id,
                recipe_count=len(recipes),
                item_count=len(self.current_list.items),
                correlation_id=create_correlation_id(),
            )
        return self.current_list

    def generate_for_plan(self, plan: WeeklyPlan) -> GroceryList:
        """List for every recipe assigned in `plan`."""
        return self.generate_list_from_recipes(plan.assigned_recipes())

    def toggle_item_checked(self, item_id: UUID) -> Optional[GroceryItem]:
        """Flip one item's checked flag. Unknown IDs return None."""
        if self.current_list is None:
            return None
        item = self.current_list.get_item(item_id)
        if item is None:
            return None
        item.is_checked = not item.is_checked
        self._save()
        return item

    def clear_checked_items(self) -> int:
        """Drop checked items from the list. Returns how many were removed."""
        if self.current_list is None:
            return 0

        before = len(self.current_list.items)
        self.current_list.items = [
            item for item in self.current_list.items if not item.is_checked
        ]
        removed = before - len(self.current_list.items)
        if removed:
            self._save()
            logger.info("grocery_items_cleared", removed=removed)
            if self._audit_logger:
                self._audit_logger.log_grocery_items_cleared(self.current_list.id, removed)
        return removed
