"""Pipeline step implementations."""

from .aggregate_finances_step import AggregateFinancesStep
from .compute_report_steps import (
    ComputeBookingsReportStep,
    ComputeDashboardStep,
    ComputeFinanceReportStep,
    ComputeGuestsReportStep,
    ComputePropertiesReportStep,
)
from .fetch_booking_relations_step import FetchBookingRelationsStep
from .fetch_bookings_step import FetchBookingsStep
from .fetch_manual_finances_step import FetchManualFinancesStep
from .fetch_owner_profile_step import FetchOwnerProfileStep
from .fetch_owner_scope_step import FetchOwnerScopeStep
from .resolve_owner_step import ResolveOwnerStep
from .stitch_bookings_step import StitchBookingsStep
from .stitch_guests_step import StitchGuestsStep

__all__ = [
    "ResolveOwnerStep",
    "FetchOwnerScopeStep",
    "FetchOwnerProfileStep",
    "FetchBookingsStep",
    "FetchBookingRelationsStep",
    "StitchBookingsStep",
    "FetchManualFinancesStep",
    "StitchGuestsStep",
    "AggregateFinancesStep",
    "ComputeDashboardStep",
    "ComputeBookingsReportStep",
    "ComputeGuestsReportStep",
    "ComputeFinanceReportStep",
    "ComputePropertiesReportStep",
]
