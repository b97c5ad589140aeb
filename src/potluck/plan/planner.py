"""Meal plan generation and plan file handling."""

import random
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from pathlib import Path

import yaml

from potluck.exceptions import PotluckError, RecipeFormatError
from potluck.logging_config import get_logger

logger = get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD date given on the command line."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise PotluckError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


class MealPlanner:
    """
    Assigns recipes to consecutive days.

    Recipes are drawn from shuffled permutations of the whole set, so every
    recipe is used once before any of them repeats.
    """

    def __init__(self, recipe_names: Sequence[str], rng: random.Random | None = None):
        if not recipe_names:
            raise PotluckError("No recipes found")
        self.recipe_names = list(recipe_names)
        self.rng = rng or random.Random()

    def _draw(self) -> Iterable[str]:
        while True:
            order = self.recipe_names[:]
            self.rng.shuffle(order)
            yield from order

    def plan(self, start: date | None = None, end: date | None = None) -> dict[str, str]:
        """
        Build a plan mapping ``YYYY-MM-DD`` to a recipe name.

        Args:
            start: First day, defaults to today.
            end: Last day (inclusive). Defaults to one day per known recipe.
        """
        start = start or date.today()
        if end is None:
            days = len(self.recipe_names)
        else:
            if end < start:
                raise PotluckError(f"End date {end} is before start date {start}")
            days = (end - start).days + 1

        draw = iter(self._draw())
        plan = {
            (start + timedelta(days=offset)).strftime(DATE_FORMAT): next(draw)
            for offset in range(days)
        }

        logger.info(f"Planned {days} days starting {start}")
        return plan


def dump_plan(plan: dict[str, str]) -> str:
    return yaml.safe_dump(plan, sort_keys=True, default_flow_style=False, allow_unicode=True)


def load_plan_files(paths: Iterable[str | Path]) -> list[str]:
    """Read plan files and return their recipe names in date order per file."""
    names: list[str] = []

    for path in paths:
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise RecipeFormatError(f"Plan {path} is not valid yaml ({e})", str(path)) from e

        if data is None:
            continue
        if not isinstance(data, dict):
            raise RecipeFormatError(f"Plan {path} is not a date -> recipe mapping", str(path))

        for day in sorted(data, key=str):
            names.append(str(data[day]))

    return names
