"""Grocery list generation from one or more recipes."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from potluck.exceptions import ScalingError
from potluck.logging_config import get_logger
from potluck.models import Recipe
from potluck.normalize.quantity import (
    QuantityRange,
    format_quantity,
    normalize_units,
    parse_ingredient,
)

logger = get_logger(__name__)

AggregateTable = dict[str, QuantityRange]
RecipeLoader = Callable[[str], Recipe]


def aggregate(table: AggregateTable, recipe: Recipe, persons: int) -> AggregateTable:
    """
    Scale a recipe's ingredients to ``persons`` and merge them into ``table``.

    Entries are keyed by the verbatim unit/name suffix, so "100g flour" and
    "150g flour" merge while "100 g flour" stays separate. After merging, the
    whole table gets one unit normalization pass.

    Args:
        table: Accumulator, mutated in place.
        recipe: Recipe whose ``persons`` is the base serving count.
        persons: Target serving count.

    Returns:
        The same ``table``, for fold-style use.

    Raises:
        ScalingError: If either serving count is not positive.
    """
    if recipe.persons <= 0:
        raise ScalingError(
            f"Recipe '{recipe.name}' has a serving count of {recipe.persons}; cannot scale"
        )
    if persons <= 0:
        raise ScalingError(f"Cannot scale recipe '{recipe.name}' to {persons} persons")

    factor = persons / recipe.persons

    for line in recipe.ingredients:
        suffix, quantity = parse_ingredient(line)
        scaled = quantity.scaled(factor)
        if suffix in table:
            table[suffix] = table[suffix] + scaled
        else:
            table[suffix] = scaled

    normalize_units(table)
    return table


def to_sorted_list(table: AggregateTable) -> list[str]:
    """Render the table as lines sorted by suffix."""
    return [format_quantity(suffix, table[suffix]) for suffix in sorted(table)]


@dataclass
class ShoppingList:
    """Merged ingredient list for a set of recipes."""

    persons: int
    recipe_names: list[str] = field(default_factory=list)
    table: AggregateTable = field(default_factory=dict)

    @property
    def items(self) -> list[str]:
        return to_sorted_list(self.table)

    def add_recipe(self, name: str, recipe: Recipe) -> None:
        """Merge a recipe, falling back to its own serving count when persons <= 0."""
        persons = self.persons if self.persons > 0 else recipe.persons
        aggregate(self.table, recipe, persons)
        self.recipe_names.append(name)


class ShoppingListGenerator:
    """Builds shopping lists by folding recipes into one aggregate table."""

    def __init__(self, loader: RecipeLoader):
        self.loader = loader

    def generate(self, names: Iterable[str], persons: int) -> ShoppingList:
        """
        Aggregate the named recipes for ``persons`` people.

        A recipe listed twice is counted twice, as when a meal plan repeats it.
        """
        shopping_list = ShoppingList(persons=persons)

        for name in names:
            recipe = self.loader(name)
            shopping_list.add_recipe(name, recipe)

        logger.info(
            f"Generated shopping list: {len(shopping_list.table)} items "
            f"from {len(shopping_list.recipe_names)} recipes for {persons} persons"
        )
        return shopping_list
