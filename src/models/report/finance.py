"""Report models for the finance dashboard."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.models.store import ManualFinanceEntry

ZERO = Decimal("0")


class MonthlyBucket(BaseModel):
    """Sums for one calendar month of the report year."""

    month: str = Field(description="Short month name, e.g. 'Jan'")
    revenue: Decimal = ZERO
    commission: Decimal = ZERO
    net: Decimal = ZERO
    bookings: int = 0
    manual_income: Decimal = Field(default=ZERO, alias="manualIncome")
    manual_expenses: Decimal = Field(default=ZERO, alias="manualExpenses")
    manual_net: Decimal = Field(default=ZERO, alias="manualNet")
    combined_revenue: Decimal = Field(default=ZERO, alias="combinedRevenue")
    combined_net: Decimal = Field(default=ZERO, alias="combinedNet")

    model_config = ConfigDict(populate_by_name=True)


class FinanceTotals(BaseModel):
    """Year-to-date totals across bookings and the manual ledger."""

    total_earnings: Decimal = Field(default=ZERO, alias="totalEarnings")
    total_commission: Decimal = Field(default=ZERO, alias="totalCommission")
    net_revenue: Decimal = Field(default=ZERO, alias="netRevenue")
    manual_income: Decimal = Field(default=ZERO, alias="manualIncome")
    manual_expenses: Decimal = Field(default=ZERO, alias="manualExpenses")
    manual_net: Decimal = Field(default=ZERO, alias="manualNet")
    combined_revenue: Decimal = Field(default=ZERO, alias="combinedRevenue")
    combined_net: Decimal = Field(default=ZERO, alias="combinedNet")

    model_config = ConfigDict(populate_by_name=True)


class FinanceMetrics(BaseModel):
    """Derived KPIs. Rates are percentages; commission rate stays a fraction."""

    occupancy_rate: Decimal = Field(default=ZERO, alias="occupancyRate")
    average_daily_rate: Decimal = Field(default=ZERO, alias="averageDailyRate")
    average_rev_par: Decimal = Field(default=ZERO, alias="averageRevPAR")
    guest_rating: Decimal = Field(default=ZERO, alias="guestRating")
    commission_rate: Decimal = Field(default=ZERO, alias="commissionRate")
    pending_payouts: Decimal = Field(default=ZERO, alias="pendingPayouts")

    model_config = ConfigDict(populate_by_name=True)


class RevenueBreakdownItem(BaseModel):
    name: str
    value: Decimal


class PayoutEstimate(BaseModel):
    """Projected payout for one month of combined net revenue."""

    id: str
    amount: Decimal
    period: str
    status: str
    payout_date: date = Field(alias="date")
    method: str = "Bank Transfer"

    model_config = ConfigDict(populate_by_name=True)


class FinanceReport(BaseModel):
    """Output of the finance pipeline."""

    year: int
    monthly: list[MonthlyBucket] = Field(default_factory=list)
    totals: FinanceTotals = Field(default_factory=FinanceTotals)
    metrics: FinanceMetrics = Field(default_factory=FinanceMetrics)
    revenue_breakdown: list[RevenueBreakdownItem] = Field(
        default_factory=list, alias="revenueBreakdown"
    )
    payouts: list[PayoutEstimate] = Field(default_factory=list)
    manual_entries: list[ManualFinanceEntry] = Field(
        default_factory=list, alias="manualEntries"
    )

    model_config = ConfigDict(populate_by_name=True)
