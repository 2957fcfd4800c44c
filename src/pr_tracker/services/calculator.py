"""Percentage calculator over weight-based personal records.

Record values are free text. The calculator understands a small grammar:

    quantity := number [unit]        "100kg", "100 kg", "225.5 lbs", "1,5kg"
    duration := m:ss | h:mm:ss       "5:30", "1:02:15"

Anything else is rejected with ValueParseError instead of producing NaN.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable

from ..errors import ValidationError, ValueParseError
from ..models.records import PersonalRecord

QUANTITY_RE = re.compile(r"^\s*(\d+(?:[.,]\d+)?)\s*([A-Za-z]+)?\s*$")
DURATION_RE = re.compile(r"^\s*(\d+):([0-5]\d)(?::([0-5]\d))?\s*$")

DEFAULT_PERCENTAGES = tuple(range(50, 105, 5))


@dataclass(frozen=True)
class Quantity:
    """A number with an optional unit suffix."""

    amount: float
    unit: str = ""

    def __str__(self) -> str:
        return format_quantity(self)


@dataclass(frozen=True)
class Duration:
    """A time result, in seconds."""

    seconds: int

    def __str__(self) -> str:
        minutes, seconds = divmod(self.seconds, 60)
        hours, minutes = divmod(minutes, 60)
        if hours:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"


def parse_value(text: str) -> Quantity | Duration:
    """Parse a record value.

    Raises:
        ValueParseError: If the text is neither a quantity nor a duration
    """
    if text is None:
        raise ValueParseError("No value to parse")

    match = DURATION_RE.match(text)
    if match:
        first, second, third = match.groups()
        if third is None:
            return Duration(int(first) * 60 + int(second))
        return Duration(int(first) * 3600 + int(second) * 60 + int(third))

    match = QUANTITY_RE.match(text)
    if match:
        number, unit = match.groups()
        return Quantity(float(number.replace(",", ".")), unit or "")

    raise ValueParseError(f'"{text}" is not a number with an optional unit or a time')


def is_weight_based(record: PersonalRecord) -> bool:
    try:
        return isinstance(parse_value(record.value), Quantity)
    except ValueParseError:
        return False


def weight_based_records(records: Iterable[PersonalRecord]) -> list[PersonalRecord]:
    """Records whose value the calculator can scale."""
    return [r for r in records if is_weight_based(r)]


def parse_percentage(value: str | float | int) -> float:
    """Parse a percentage input.

    Raises:
        ValidationError: Not a finite, non-negative number
    """
    try:
        pct = float(str(value).strip().rstrip("%"))
    except ValueError:
        raise ValidationError(f'"{value}" is not a valid percentage') from None
    if not math.isfinite(pct) or pct < 0:
        raise ValidationError("Percentage must be a non-negative number")
    return pct


def percentage_of(value: str | Quantity, percentage: str | float | int) -> Quantity:
    """Scale a weight-based value by a percentage.

    Raises:
        ValueParseError: The value is a time or cannot be parsed
        ValidationError: The percentage is invalid
    """
    pct = parse_percentage(percentage)
    quantity = parse_value(value) if isinstance(value, str) else value
    if isinstance(quantity, Duration):
        raise ValueParseError("Percentages can only be calculated for weight-based records")
    return Quantity(quantity.amount * pct / 100, quantity.unit)


def percentage_table(
    value: str | Quantity,
    percentages: Iterable[int | float] = DEFAULT_PERCENTAGES,
) -> list[tuple[int | float, Quantity]]:
    """Rows of (percentage, scaled value) for quick reference."""
    return [(pct, percentage_of(value, pct)) for pct in percentages]


def format_quantity(quantity: Quantity) -> str:
    """Format with two decimals and the unit, e.g. "120.00 kg"."""
    if quantity.unit:
        return f"{quantity.amount:.2f} {quantity.unit}"
    return f"{quantity.amount:.2f}"
