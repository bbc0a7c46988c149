"""Report output models."""

from src.models.report.booking import (
    BookingsReport,
    BookingStats,
    RecentBooking,
    StitchedBooking,
)
from src.models.report.dashboard import (
    DashboardReport,
    DashboardStats,
    PropertiesReport,
    PropertyListing,
    PropertyStats,
)
from src.models.report.finance import (
    FinanceMetrics,
    FinanceReport,
    FinanceTotals,
    MonthlyBucket,
    PayoutEstimate,
    RevenueBreakdownItem,
)
from src.models.report.guest import GuestProfile, GuestsReport, GuestStats

__all__ = [
    "StitchedBooking",
    "BookingStats",
    "BookingsReport",
    "RecentBooking",
    "GuestProfile",
    "GuestStats",
    "GuestsReport",
    "MonthlyBucket",
    "FinanceTotals",
    "FinanceMetrics",
    "RevenueBreakdownItem",
    "PayoutEstimate",
    "FinanceReport",
    "DashboardStats",
    "DashboardReport",
    "PropertyListing",
    "PropertyStats",
    "PropertiesReport",
]
