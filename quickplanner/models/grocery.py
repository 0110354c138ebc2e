"""Grocery list models."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class GroceryItem(BaseModel):
    """
    One line of the shopping list.

    `name` is the merge key (compared case-insensitively). `quantity`
    is free text and comes from the first recipe that needed the item.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        description="Item name"
    )
    quantity: str = Field(
        default="",
        description="Quantity with optional unit, e.g. '2 cups'"
    )
    is_checked: bool = False
    recipe_names: list[str] = Field(
        default_factory=list,
        description="Recipes that need this item"
    )

    @property
    def key(self) -> str:
        return self.name.lower()

    def add_recipe(self, recipe_name: str) -> None:
        if recipe_name not in self.recipe_names:
            self.recipe_names.append(recipe_name)


class GroceryList(BaseModel):
    """A generated shopping list, items sorted by name."""

    id: UUID = Field(default_factory=uuid4)
    generated_at: datetime = Field(default_factory=datetime.utcnow)
    items: list[GroceryItem] = Field(default_factory=list)

    def find_item(self, name: str) -> Optional[GroceryItem]:
        key = name.lower()
        for item in self.items:
            if item.key == key:
                return item
        return None

    def get_item(self, item_id: UUID) -> Optional[GroceryItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def checked_count(self) -> int:
        return sum(1 for item in self.items if item.is_checked)
