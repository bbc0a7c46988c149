"""Row models for the hosted relational store."""

from src.models.store.booking import Booking, BookingStatusEntry, RefundRequest
from src.models.store.finance import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    ManualFinanceEntry,
    categories_for,
)
from src.models.store.guest import ID_TYPES, Guest
from src.models.store.owner import OwnerKyc, OwnerProfile
from src.models.store.property import Property, RoomType

__all__ = [
    "Booking",
    "BookingStatusEntry",
    "RefundRequest",
    "Guest",
    "ID_TYPES",
    "Property",
    "RoomType",
    "ManualFinanceEntry",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "categories_for",
    "OwnerProfile",
    "OwnerKyc",
]
