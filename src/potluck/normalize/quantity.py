"""Ingredient quantity parsing and unit normalization."""

import math
from dataclasses import dataclass

from potluck.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Unit Normalization Table
# =============================================================================


@dataclass(frozen=True)
class UnitRule:
    """Rewrite a sub-1 quantity of ``source`` into ``target`` units."""

    source: str
    target: str
    multiplier: float


# Closed rule set. Only the leading token of a suffix is matched.
UNIT_RULES: tuple[UnitRule, ...] = (
    UnitRule(source="kg", target="g", multiplier=1000.0),
    UnitRule(source="l", target="ml", multiplier=1000.0),
)

_RULES_BY_SOURCE: dict[str, UnitRule] = {rule.source: rule for rule in UNIT_RULES}


@dataclass
class QuantityRange:
    """A magnitude, optionally a range. ``to`` is 0 when no range was written."""

    start: float = 0.0
    to: float = 0.0

    def __add__(self, other: "QuantityRange") -> "QuantityRange":
        return QuantityRange(start=self.start + other.start, to=self.to + other.to)

    def scaled(self, factor: float) -> "QuantityRange":
        """Return both bounds multiplied by ``factor``."""
        return QuantityRange(start=self.start * factor, to=self.to * factor)

    def rounded(self) -> tuple[int, int]:
        """Round both bounds half-up to integers."""
        return round_half_up(self.start), round_half_up(self.to)


# =============================================================================
# Parsing
# =============================================================================


def _to_number(digits: str) -> float:
    """Convert a digit run, degrading anything unparseable to zero."""
    try:
        return float(int(digits))
    except (ValueError, OverflowError):
        return 0.0


def parse_ingredient(line: str) -> tuple[str, QuantityRange]:
    """
    Split an ingredient line into its unit/name suffix and quantity.

    Grammar: ``<digits>[-<digits>]<suffix>``. The suffix starts at the first
    character that ends a digit run and is kept verbatim, including any
    leading space, because it is the aggregation key.

    Examples:
        "250g pork"          -> ("g pork", 250)
        "1-2 cups mushrooms" -> (" cups mushrooms", 1-2)
        "salt"               -> ("salt", 0)

    Never raises: digit runs that ``int`` rejects count as zero.
    """
    pos = 0
    while pos < len(line) and line[pos].isdigit():
        pos += 1

    if pos == 0:
        return line, QuantityRange()

    quantity = QuantityRange(start=_to_number(line[:pos]))

    if pos < len(line) and line[pos] == "-":
        to_start = pos + 1
        pos = to_start
        while pos < len(line) and line[pos].isdigit():
            pos += 1
        quantity.to = _to_number(line[to_start:pos])

    return line[pos:], quantity


# =============================================================================
# Normalization and formatting
# =============================================================================


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def split_unit(suffix: str) -> tuple[str, str]:
    """
    Split a suffix at its first space into (unit token, rest).

    The rest keeps the space. Suffixes without a space have no unit token.
    """
    space = suffix.find(" ")
    if space < 0:
        return "", suffix
    return suffix[:space], suffix[space:]


def normalize_units(table: dict[str, QuantityRange]) -> None:
    """
    Rewrite sub-1 kg/l entries into g/ml, merging into existing entries.

    Only ``start`` is checked against the threshold and the pass does not
    cascade: a rewritten entry is never inspected again.
    """
    for suffix, quantity in list(table.items()):
        if quantity.start >= 1.0:
            continue

        unit, rest = split_unit(suffix)
        rule = _RULES_BY_SOURCE.get(unit)
        if rule is None:
            continue

        target_key = rule.target + rest
        # Both bounds move so a range stays in one unit.
        moved = quantity.scaled(rule.multiplier)
        del table[suffix]
        table[target_key] = table.get(target_key, QuantityRange()) + moved
        logger.debug(f"Normalized '{suffix}' -> '{target_key}'")


def format_quantity(suffix: str, quantity: QuantityRange) -> str:
    """Render one table entry as a shopping list line."""
    start, to = quantity.rounded()

    if start == 0:
        return suffix
    if to == 0 or start == to:
        return f"{start}{suffix}"
    return f"{start}-{to}{suffix}"
