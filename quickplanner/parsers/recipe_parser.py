"""
Recipe Document Parser

Recipe documents are HTML exports with a fixed set of marker tags.
We do not run a general HTML parser over them: each value sits between
a known opening marker and the next closing tag, so a plain substring
scan is both sufficient and exact.

Missing markers are NOT errors. A document without a name falls back
to its file name, missing times count as zero, missing sections give
empty lists. The only hard failure is a file that cannot be read as
UTF-8 text.
"""

from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from quickplanner.models.recipe import DEFAULT_DIFFICULTY, Recipe
from quickplanner.parsers.errors import InvalidDataError, RecipeReadError


logger = structlog.get_logger(__name__)


NAME_START = '<h1 itemprop="name" class="name">'
NAME_END = "</h1>"
PREP_TIME_START = '<b>Prep Time: </b><span itemprop="prepTime">'
COOK_TIME_START = '<b>Cook Time: </b><span itemprop="cookTime">'
TIME_END = "</span>"
CATEGORIES_START = '<p itemprop="recipeCategory" class="categories">'
CATEGORIES_END = "</p>"

INGREDIENTS_SECTION_START = '<div class="ingredients text">'
INSTRUCTIONS_SECTION_START = '<div itemprop="recipeInstructions" class="directions text">'
SECTION_END = "</div>"
INGREDIENT_LINE_START = '<p class="line" itemprop="recipeIngredient">'
INSTRUCTION_LINE_START = '<p class="line">'
LINE_END = "</p>"

DEFAULT_TIME = "0 min"


def extract_value(text: str, start: str, end: str) -> Optional[str]:
    """
    Text between the first `start` marker and the next `end` marker.

    Returns None if either marker is missing.
    """
    start_index = text.find(start)
    if start_index == -1:
        return None
    value_start = start_index + len(start)
    end_index = text.find(end, value_start)
    if end_index == -1:
        return None
    return text[value_start:end_index].strip()


def extract_lines(
    text: str,
    section_start: str,
    line_start: str,
    section_end: str = SECTION_END,
    line_end: str = LINE_END,
) -> list[str]:
    """
    Collect every line item inside a section.

    The section runs from `section_start` to the next `section_end`.
    Inside it each `line_start`...`line_end` pair is one entry; the
    scan stops at the first unmatched marker. Empty entries are dropped.
    """
    section = extract_value(text, section_start, section_end)
    if section is None:
        return []

    lines = []
    position = 0
    while True:
        begin = section.find(line_start, position)
        if begin == -1:
            break
        content_start = begin + len(line_start)
        finish = section.find(line_end, content_start)
        if finish == -1:
            break
        line = section[content_start:finish].strip()
        if line:
            lines.append(line)
        position = finish + len(line_end)
    return lines


def parse_time_string(value: str) -> int:
    """
    Convert "<n> min" / "<n> hour(s)" to minutes.

    Only the first number/unit pair is read. Anything unrecognized
    is 0, never an error.
    """
    parts = value.split(" ")
    if len(parts) >= 2:
        try:
            number = int(parts[0])
        except ValueError:
            number = None
        # Negative durations are unreadable, not errors
        if number is not None and number >= 0:
            if "hour" in parts[1]:
                return number * 60
            if "min" in parts[1]:
                return number
    logger.debug("time_string_unparsed", value=value)
    return 0


class RecipeParser:
    """Turns recipe documents into Recipe models."""

    def parse_text(self, text: str, fallback_name: str) -> Recipe:
        """Parse document text. `fallback_name` is used when no name marker exists."""
        name = extract_value(text, NAME_START, NAME_END) or fallback_name

        prep_time = parse_time_string(
            extract_value(text, PREP_TIME_START, TIME_END) or DEFAULT_TIME
        )
        cook_time = parse_time_string(
            extract_value(text, COOK_TIME_START, TIME_END) or DEFAULT_TIME
        )

        categories_text = extract_value(text, CATEGORIES_START, CATEGORIES_END) or ""
        categories = [
            category.strip()
            for category in categories_text.split(",")
            if category.strip()
        ]

        ingredients = extract_lines(text, INGREDIENTS_SECTION_START, INGREDIENT_LINE_START)
        instructions = extract_lines(text, INSTRUCTIONS_SECTION_START, INSTRUCTION_LINE_START)

        try:
            recipe = Recipe(
                name=name,
                prep_time=prep_time,
                cook_time=cook_time,
                difficulty=DEFAULT_DIFFICULTY,
                ingredients=ingredients,
                instructions=instructions,
                categories=categories,
            )
        except ValidationError as e:
            raise InvalidDataError(f"Invalid recipe {name!r}: {e}") from e
        logger.debug(
            "recipe_parsed",
            name=recipe.name,
            total_time=recipe.total_time,
            ingredients=len(ingredients),
            instructions=len(instructions),
        )
        return recipe

    def parse_file(self, path: Union[str, Path]) -> Recipe:
        """
        Parse one recipe document from disk.

        Raises:
            RecipeReadError: If the file cannot be read or is not UTF-8
        """
        path = Path(path)
        try:
            text = path.read_bytes().decode("utf-8")
        except OSError as e:
            raise RecipeReadError(str(path), f"Could not read {path.name}: {e}")
        except UnicodeDecodeError as e:
            raise RecipeReadError(str(path), f"{path.name} is not UTF-8 text: {e}")

        return self.parse_text(text, fallback_name=path.stem)
