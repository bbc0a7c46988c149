"""Pydantic model for manually entered ledger lines."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.statuses import FinanceEntryType
from src.models.store.fields import parse_amount, parse_date

EXPENSE_CATEGORIES = (
    "Marketing & Advertising",
    "Maintenance & Repairs",
    "Utilities",
    "Staff Salaries",
    "Supplies",
    "Insurance",
    "Taxes",
    "Professional Services",
    "Equipment",
    "Other",
)

INCOME_CATEGORIES = (
    "Direct Bookings",
    "Events & Functions",
    "Food & Beverage",
    "Spa & Wellness",
    "Laundry Services",
    "Transportation",
    "Tour Packages",
    "Other Services",
)


def categories_for(entry_type: FinanceEntryType) -> tuple[str, ...]:
    """Return the category enumeration allowed for an entry type."""
    if entry_type == FinanceEntryType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


class ManualFinanceEntry(BaseModel):
    """Owner-entered ledger line (``manual_finances`` table).

    Income is stored positive. Expenses may be stored with either sign;
    aggregation uses the absolute value for expense totals.
    """

    id: str
    user_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    amount: Decimal = Field(default=Decimal("0"))
    type: FinanceEntryType
    category: str = ""
    entry_date: date = Field(alias="date")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_entry_amount(cls, v):
        return parse_amount(v)

    @field_validator("entry_date", mode="before")
    @classmethod
    def parse_entry_date(cls, v):
        return parse_date(v)
