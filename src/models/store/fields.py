"""Shared coercion helpers for rows returned by the store."""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any


def parse_amount(value: Any) -> Decimal:
    """Parse a monetary column into a Decimal.

    Numeric columns arrive as JSON numbers, numeric strings or null.
    Anything that does not parse counts as zero.
    """
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal("0")
    try:
        # str() keeps floats from dragging binary noise into the Decimal
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def parse_date(value: Any) -> Any:
    """Accept full timestamps where a date column is expected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[4] == "-":
        return value[:10]
    return value


def to_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def to_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with store values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
