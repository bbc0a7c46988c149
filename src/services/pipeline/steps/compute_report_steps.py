"""Final steps that turn stitched rows into report models."""

from typing import Any, Optional

from src.models.report import (
    BookingsReport,
    DashboardReport,
    FinanceReport,
    GuestsReport,
    PropertiesReport,
)
from src.models.statuses import BookingStatus, GuestStatus, PropertyStatus
from src.services.pipeline import PipelineContext, PipelineStep
from src.transformers import (
    MetricCalculator,
    filter_bookings,
    filter_guests,
    filter_properties,
)


def _tab(value: Any, enum_type: type) -> Optional[Any]:
    """Status tab option to enum; None or "all" means no filter."""
    if value is None or value == "all":
        return None
    return enum_type(value)


class ComputeDashboardStep(PipelineStep):
    """Headline stats, recent bookings and owner branding."""

    def __init__(self):
        super().__init__("ComputeDashboard")

    async def execute(self, context: PipelineContext) -> bool:
        profile = context.owner_profile
        context.result = DashboardReport(
            business_name=(profile.business_name or "") if profile else "",
            logo_url=(profile.logo_url or "") if profile else "",
            stats=MetricCalculator.dashboard_stats(context.stitched_bookings, context.as_of),
            recent_bookings=MetricCalculator.recent_bookings(context.stitched_bookings),
        )
        return True


class ComputeBookingsReportStep(PipelineStep):
    """Bookings list for the selected tab, with stats over all bookings."""

    def __init__(self):
        super().__init__("ComputeBookingsReport")

    async def execute(self, context: PipelineContext) -> bool:
        status = _tab(context.options.get("status"), BookingStatus)
        bookings = filter_bookings(
            context.stitched_bookings,
            status=status,
            search=context.options.get("search", ""),
            date_range=context.options.get("date_range", "all"),
            today=context.as_of.date(),
        )
        context.result = BookingsReport(
            bookings=bookings,
            stats=MetricCalculator.booking_stats(context.stitched_bookings, context.as_of),
            status_filter=status,
        )
        return True


class ComputeGuestsReportStep(PipelineStep):
    """Guest CRM list and stats. Stats cover every guest, not just the filtered view."""

    def __init__(self):
        super().__init__("ComputeGuestsReport")

    async def execute(self, context: PipelineContext) -> bool:
        guests = filter_guests(
            context.guest_profiles,
            search=context.options.get("search", ""),
            status=_tab(context.options.get("status"), GuestStatus),
            sort_by=context.options.get("sort_by", "recent"),
        )
        context.result = GuestsReport(
            guests=guests,
            stats=MetricCalculator.guest_stats(context.guest_profiles),
        )
        return True


class ComputeFinanceReportStep(PipelineStep):
    """Totals, KPIs, revenue breakdown and payout schedule."""

    def __init__(self):
        super().__init__("ComputeFinanceReport")

    async def execute(self, context: PipelineContext) -> bool:
        year = context.year
        totals = MetricCalculator.finance_totals(context.monthly)
        context.result = FinanceReport(
            year=year,
            monthly=context.monthly,
            totals=totals,
            metrics=MetricCalculator.finance_metrics(
                totals,
                context.stitched_bookings,
                context.room_types,
                context.properties,
            ),
            revenue_breakdown=MetricCalculator.revenue_breakdown(totals),
            payouts=MetricCalculator.payout_schedule(context.monthly, year),
            manual_entries=context.manual_entries,
        )
        return True


class ComputePropertiesReportStep(PipelineStep):
    """Property listings with capacity and occupancy."""

    def __init__(self):
        super().__init__("ComputePropertiesReport")

    async def execute(self, context: PipelineContext) -> bool:
        status = _tab(context.options.get("status"), PropertyStatus)
        listings = MetricCalculator.property_listings(
            context.properties, context.room_types, context.stitched_bookings
        )
        context.result = PropertiesReport(
            properties=filter_properties(
                listings, search=context.options.get("search", ""), status=status
            ),
            stats=MetricCalculator.property_stats(listings),
            status_filter=status.value if status else None,
        )
        return True
