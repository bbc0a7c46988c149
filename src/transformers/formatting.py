"""Locale-aware display strings for report values."""

from decimal import ROUND_HALF_UP, Decimal

from babel.numbers import format_currency, format_decimal

from src.config import settings

# Whole currency units with Indian digit grouping (12,34,567)
CURRENCY_PATTERN = "¤#,##,##0"


def format_money(amount: Decimal) -> str:
    """Format an amount as whole units of the configured currency."""
    whole = Decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return format_currency(
        whole,
        settings.finance.currency,
        format=CURRENCY_PATTERN,
        locale=settings.finance.locale,
        currency_digits=False,
    )


def format_percent(value: Decimal, digits: int = 1) -> str:
    """Format a value already expressed as a percent, e.g. 12.5 -> '12.5%'."""
    rounded = Decimal(value).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    pattern = "#,##0." + "0" * digits if digits else "#,##0"
    return f"{format_decimal(rounded, format=pattern, locale=settings.finance.locale)}%"


def format_rating(value: Decimal) -> str:
    rounded = Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return format_decimal(rounded, format="0.0", locale=settings.finance.locale)
