"""Meal planning and grocery list aggregation."""

from potluck.plan.planner import (
    MealPlanner,
    dump_plan,
    load_plan_files,
    parse_date,
)
from potluck.plan.shopping_list import (
    AggregateTable,
    ShoppingList,
    ShoppingListGenerator,
    aggregate,
    to_sorted_list,
)

__all__ = [
    "AggregateTable",
    "MealPlanner",
    "ShoppingList",
    "ShoppingListGenerator",
    "aggregate",
    "dump_plan",
    "load_plan_files",
    "parse_date",
    "to_sorted_list",
]
