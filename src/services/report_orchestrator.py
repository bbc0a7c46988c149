"""Report orchestrator: builds and runs one pipeline per report."""

from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Optional

from structlog import get_logger

from src.clients import AuthClient, RedisSessionStore, StoreClient
from src.models.report import (
    BookingsReport,
    DashboardReport,
    FinanceReport,
    GuestsReport,
    PropertiesReport,
)
from src.services.actions import SIGN_IN_MESSAGE
from src.services.pipeline import Pipeline, PipelineContext
from src.services.pipeline.context import ERROR, UNAUTHENTICATED
from src.services.pipeline.steps import (
    AggregateFinancesStep,
    ComputeBookingsReportStep,
    ComputeDashboardStep,
    ComputeFinanceReportStep,
    ComputeGuestsReportStep,
    ComputePropertiesReportStep,
    FetchBookingRelationsStep,
    FetchBookingsStep,
    FetchManualFinancesStep,
    FetchOwnerProfileStep,
    FetchOwnerScopeStep,
    ResolveOwnerStep,
    StitchBookingsStep,
    StitchGuestsStep,
)
from src.transformers import format_money, format_percent, format_rating

logger = get_logger(__name__)

REPORTS = ("dashboard", "bookings", "guests", "finance", "properties")
FETCH_ERROR_MESSAGES = {
    "dashboard": "Failed to load dashboard data",
    "bookings": "Failed to load bookings",
    "guests": "Failed to load guests",
    "finance": "Failed to load financial data",
    "properties": "Failed to load properties",
}


class ReportOrchestrator:
    """Runs report pipelines and publishes their results.

    Each report has a generation counter. A run that finishes after a newer
    run of the same report has started is discarded, so an older refresh can
    never overwrite newer data. Failed runs fall back to the last published
    data for that report, flagged stale.
    """

    def __init__(
        self,
        auth_client: Optional[AuthClient] = None,
        store_client: Optional[StoreClient] = None,
        session_store: Optional[RedisSessionStore] = None,
    ):
        """Initialize the orchestrator with the service clients."""
        self.auth_client = auth_client or AuthClient()
        self.store_client = store_client or StoreClient()
        self.session_store = session_store
        self._generations: dict[str, int] = defaultdict(int)
        self._published: dict[str, dict[str, Any]] = {}

    def build_pipeline(self, report: str) -> Pipeline:
        """Assemble the step sequence for a report.

        Raises:
            ValueError: If the report name is unknown
        """
        store = self.store_client
        head = [ResolveOwnerStep(self.auth_client), FetchOwnerScopeStep(store)]
        stitched = [FetchBookingRelationsStep(store), StitchBookingsStep()]

        if report == "dashboard":
            steps = head + [
                FetchOwnerProfileStep(store),
                FetchBookingsStep(store),
                *stitched,
                ComputeDashboardStep(),
            ]
        elif report == "bookings":
            steps = head + [FetchBookingsStep(store), *stitched, ComputeBookingsReportStep()]
        elif report == "guests":
            steps = head + [
                FetchBookingsStep(store, require_guest=True),
                *stitched,
                StitchGuestsStep(),
                ComputeGuestsReportStep(),
            ]
        elif report == "finance":
            steps = head + [
                FetchBookingsStep(store, current_year_only=True),
                *stitched,
                FetchManualFinancesStep(store),
                AggregateFinancesStep(),
                ComputeFinanceReportStep(),
            ]
        elif report == "properties":
            steps = head + [FetchBookingsStep(store), *stitched, ComputePropertiesReportStep()]
        else:
            raise ValueError(f"Unknown report: {report}")

        return Pipeline(report, steps)

    async def _access_token(self, access_token: Optional[str]) -> Optional[str]:
        if access_token or self.session_store is None:
            return access_token
        session = await self.session_store.load()
        return session.access_token if session else None

    async def run_report(
        self,
        name: str,
        access_token: Optional[str] = None,
        as_of: Optional[datetime] = None,
        **options: Any,
    ) -> dict[str, Any]:
        """Run one report.

        Args:
            name: Report name, one of REPORTS
            access_token: Owner session token; the cached session is used when omitted
            as_of: Reference instant; defaults to now
            **options: Report options (status, search, date_range, sort_by, year)

        Returns:
            Results dict with ``state``, ``data``, ``display``, ``stale``,
            ``discarded`` and ``message`` alongside the run statistics
        """
        if name not in REPORTS:
            raise ValueError(f"Unknown report: {name}")

        self._generations[name] += 1
        generation = self._generations[name]

        context = PipelineContext(
            report=name,
            generation=generation,
            as_of=as_of,
            access_token=await self._access_token(access_token),
            options=options,
        )
        pipeline = self.build_pipeline(name)
        await pipeline.execute(context)

        results = context.get_results()
        results.update(data=None, display={}, stale=False, discarded=False, message=None)

        if self._generations[name] != generation:
            logger.info(
                "Discarding superseded report run",
                report=name,
                generation=generation,
                latest_generation=self._generations[name],
            )
            results["discarded"] = True
            return results

        state = context.state
        if state == UNAUTHENTICATED:
            results["message"] = SIGN_IN_MESSAGE
        elif state == ERROR:
            last = self._published.get(name)
            results["message"] = FETCH_ERROR_MESSAGES[name]
            if last is not None:
                results.update(data=last["data"], display=last["display"], stale=True)
        else:
            data = context.result.model_dump(by_alias=True, mode="json")
            display = DISPLAY_BUILDERS[name](context.result)
            self._published[name] = {"data": data, "display": display}
            results.update(data=data, display=display)

        logger.info(
            "Report run finished",
            report=name,
            generation=generation,
            owner_id=context.owner_id,
            state=state,
            stale=results["stale"],
        )
        return results


def _dashboard_display(report: DashboardReport) -> dict[str, Any]:
    stats = report.stats
    return {
        "businessName": report.business_name or "WriteMyTrip",
        "totalRevenue": format_money(stats.total_revenue),
        "bookingGrowth": format_percent(stats.booking_growth),
        "revenueGrowth": format_percent(stats.revenue_growth),
        "recentBookings": {b.id: format_money(b.total_amount) for b in report.recent_bookings},
    }


def _bookings_display(report: BookingsReport) -> dict[str, Any]:
    return {
        "bookings": {
            b.id: {
                "totalAmount": format_money(b.total_amount),
                "advanceAmount": format_money(b.booking.advance_amount),
                "refundRequested": (
                    format_money(b.refund_request.amount_requested_to_refund)
                    if b.refund_request else None
                ),
            }
            for b in report.bookings
        },
    }


def _guests_display(report: GuestsReport) -> dict[str, Any]:
    return {
        "repeatGuestRate": format_percent(report.stats.repeat_guest_rate, digits=0),
        "guests": {p.guest.id: format_money(p.total_spent) for p in report.guests},
    }


def _finance_display(report: FinanceReport) -> dict[str, Any]:
    totals = report.totals
    metrics = report.metrics
    return {
        "totals": {
            key: format_money(value)
            for key, value in totals.model_dump(by_alias=True).items()
        },
        "metrics": {
            "occupancyRate": format_percent(metrics.occupancy_rate),
            "averageDailyRate": format_money(metrics.average_daily_rate),
            "averageRevPAR": format_money(metrics.average_rev_par),
            "guestRating": format_rating(metrics.guest_rating),
            "commissionRate": format_percent(metrics.commission_rate, digits=0),
            "pendingPayouts": format_money(metrics.pending_payouts),
        },
        "monthly": {b.month: format_money(b.combined_net) for b in report.monthly},
        "revenueBreakdown": {i.name: format_money(i.value) for i in report.revenue_breakdown},
        "payouts": {p.id: format_money(p.amount) for p in report.payouts},
    }


def _properties_display(report: PropertiesReport) -> dict[str, Any]:
    return {
        "occupancyRate": format_percent(report.stats.occupancy_rate, digits=0),
        "properties": {
            listing.hotel.id: {
                "price": format_money(listing.hotel.price),
                "originalPrice": format_money(listing.hotel.original_price),
                "location": listing.hotel.location,
            }
            for listing in report.properties
        },
    }


DISPLAY_BUILDERS: dict[str, Callable[[Any], dict[str, Any]]] = {
    "dashboard": _dashboard_display,
    "bookings": _bookings_display,
    "guests": _guests_display,
    "finance": _finance_display,
    "properties": _properties_display,
}
