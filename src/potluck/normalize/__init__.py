"""Parse ingredient quantities and normalize their units."""

from potluck.normalize.quantity import (
    UNIT_RULES,
    QuantityRange,
    UnitRule,
    format_quantity,
    normalize_units,
    parse_ingredient,
    round_half_up,
    split_unit,
)

__all__ = [
    "UNIT_RULES",
    "QuantityRange",
    "UnitRule",
    "format_quantity",
    "normalize_units",
    "parse_ingredient",
    "round_half_up",
    "split_unit",
]
