"""KPI formulas over stitched bookings and finance aggregates.

Every ratio goes through ``ratio`` so that a zero denominator yields exactly
zero rather than an error or a NaN.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from src.config import settings
from src.models.report import (
    BookingStats,
    DashboardStats,
    FinanceMetrics,
    FinanceTotals,
    GuestProfile,
    GuestStats,
    MonthlyBucket,
    PayoutEstimate,
    PropertyListing,
    PropertyStats,
    RecentBooking,
    RevenueBreakdownItem,
    StitchedBooking,
)
from src.models.statuses import (
    OCCUPYING_STATUSES,
    BookingStatus,
    GuestStatus,
    PropertyStatus,
)
from src.models.store import Property, RoomType
from src.models.store.fields import to_utc
from src.transformers.monthly_aggregator import MONTHS

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Payout statuses for the last three months, oldest first
PAYOUT_STATUSES = ("pending", "processing", "paid")


def ratio(numerator: Decimal | int, denominator: Decimal | int) -> Decimal:
    """Divide, returning exactly 0 when the denominator is zero."""
    if not denominator:
        return ZERO
    return Decimal(numerator) / Decimal(denominator)


def growth_rate(current: Decimal | int, previous: Decimal | int) -> Decimal:
    """Percent change from previous to current; 0 when previous is 0."""
    if not previous:
        return ZERO
    return ratio(Decimal(current) - Decimal(previous), previous) * HUNDRED


def total_rooms(room_types: Iterable[RoomType]) -> int:
    """Sum of rooms across room types; a missing count is one room."""
    return sum(rt.room_count for rt in room_types)


class MetricCalculator:
    """Derives report statistics. All methods are pure."""

    @staticmethod
    def occupancy_rate(
        bookings: Iterable[StitchedBooking],
        room_types: Iterable[RoomType],
        period_days: Optional[int] = None,
    ) -> Decimal:
        """Occupied bookings over room-nights available in the period, as a percent.

        Known approximation: each checked-in or checked-out booking counts as
        a single occupied room-night, whatever its length of stay.
        """
        period_days = period_days or settings.finance.occupancy_period_days
        occupied = sum(1 for b in bookings if b.effective_status in OCCUPYING_STATUSES)
        room_nights = total_rooms(room_types) * period_days
        return ratio(occupied, room_nights) * HUNDRED

    @staticmethod
    def window_growth(
        bookings: list[StitchedBooking],
        as_of: datetime,
        window_days: Optional[int] = None,
    ) -> tuple[Decimal, Decimal]:
        """Booking-count and revenue growth of the last window vs the one before.

        Returns:
            (booking_growth, revenue_growth) as percents
        """
        window = timedelta(days=window_days or settings.finance.growth_window_days)
        as_of = to_utc(as_of)
        current_start = as_of - window
        previous_start = as_of - 2 * window

        current = [b for b in bookings if b.created_at >= current_start]
        previous = [b for b in bookings if previous_start <= b.created_at < current_start]

        booking_growth = growth_rate(len(current), len(previous))
        revenue_growth = growth_rate(
            sum((b.total_amount for b in current), ZERO),
            sum((b.total_amount for b in previous), ZERO),
        )
        return booking_growth, revenue_growth

    @staticmethod
    def finance_totals(monthly: list[MonthlyBucket]) -> FinanceTotals:
        """Roll the monthly buckets up into year totals."""

        def total(field: str) -> Decimal:
            return sum((getattr(bucket, field) for bucket in monthly), ZERO)

        manual_income = total("manual_income")
        manual_expenses = total("manual_expenses")
        net_revenue = total("net")
        return FinanceTotals(
            total_earnings=total("revenue"),
            total_commission=total("commission"),
            net_revenue=net_revenue,
            manual_income=manual_income,
            manual_expenses=manual_expenses,
            manual_net=manual_income - manual_expenses,
            combined_revenue=total("revenue") + manual_income,
            combined_net=net_revenue + manual_income - manual_expenses,
        )

    @staticmethod
    def finance_metrics(
        totals: FinanceTotals,
        bookings: list[StitchedBooking],
        room_types: list[RoomType],
        properties: list[Property],
        commission_rate: Optional[Decimal] = None,
    ) -> FinanceMetrics:
        """Occupancy, ADR, RevPAR, rating and payout KPIs for the finance report.

        ``commission_rate`` is reported as a percent here; everywhere else it
        stays a fraction.
        """
        finance = settings.finance
        commission_rate = finance.commission_rate if commission_rate is None else commission_rate

        occupancy = MetricCalculator.occupancy_rate(bookings, room_types)
        average_daily_rate = ratio(totals.total_earnings, len(bookings))
        ratings = [Decimal(str(p.rating or 0)) for p in properties]

        return FinanceMetrics(
            occupancy_rate=occupancy,
            average_daily_rate=average_daily_rate,
            average_rev_par=occupancy / HUNDRED * average_daily_rate,
            guest_rating=ratio(sum(ratings, ZERO), len(ratings)),
            commission_rate=commission_rate * HUNDRED,
            pending_payouts=totals.net_revenue * finance.pending_payout_share,
        )

    @staticmethod
    def revenue_breakdown(totals: FinanceTotals) -> list[RevenueBreakdownItem]:
        """Split earnings into room / F&B / extras shares, plus manual income."""
        finance = settings.finance
        earnings = totals.total_earnings
        return [
            RevenueBreakdownItem(name="Room Revenue", value=earnings * finance.room_revenue_share),
            RevenueBreakdownItem(name="F&B", value=earnings * finance.food_beverage_share),
            RevenueBreakdownItem(name="Extras", value=earnings * finance.extras_share),
            RevenueBreakdownItem(name="Manual Income", value=totals.manual_income),
        ]

    @staticmethod
    def payout_schedule(monthly: list[MonthlyBucket], year: int) -> list[PayoutEstimate]:
        """Projected payouts for the last three months of the report year.

        Each payout is the month's combined net, paid on the 5th of the
        following month. Returned newest first.
        """
        payouts = []
        for index, bucket in enumerate(monthly[-3:]):
            month_number = MONTHS.index(bucket.month) + 1
            if month_number == 12:
                paid_on = date(year + 1, 1, 5)
            else:
                paid_on = date(year, month_number + 1, 5)
            payouts.append(
                PayoutEstimate(
                    id=f"PO{index + 1:03d}",
                    amount=bucket.combined_net,
                    period=f"{bucket.month} {year}",
                    status=PAYOUT_STATUSES[index],
                    payout_date=paid_on,
                )
            )
        payouts.reverse()
        return payouts

    @staticmethod
    def dashboard_stats(bookings: list[StitchedBooking], as_of: datetime) -> DashboardStats:
        """Headline counts over non-cancelled bookings."""
        today = to_utc(as_of).date()
        active = [b for b in bookings if b.effective_status != BookingStatus.CANCELLED]

        def checking_in(b: StitchedBooking) -> bool:
            return b.booking.check_in_date == today

        def checking_out(b: StitchedBooking) -> bool:
            return (
                b.booking.check_out_date == today
                and b.effective_status == BookingStatus.CHECKED_IN
            )

        check_outs = sum(1 for b in active if checking_out(b))
        booking_growth, revenue_growth = MetricCalculator.window_growth(active, as_of)

        return DashboardStats(
            total_bookings=len(active),
            total_revenue=sum((b.total_amount for b in active), ZERO),
            check_ins_today=sum(
                1 for b in active
                if checking_in(b)
                and b.effective_status in (BookingStatus.CONFIRMED, BookingStatus.PENDING)
            ),
            check_outs_today=check_outs,
            pending_check_ins=sum(
                1 for b in active
                if checking_in(b) and b.effective_status == BookingStatus.CONFIRMED
            ),
            pending_check_outs=check_outs,
            booking_growth=booking_growth,
            revenue_growth=revenue_growth,
        )

    @staticmethod
    def recent_bookings(bookings: list[StitchedBooking], limit: int = 3) -> list[RecentBooking]:
        """Most recently created bookings for the dashboard feed."""
        newest = sorted(bookings, key=lambda b: (b.created_at, b.id), reverse=True)[:limit]
        return [
            RecentBooking(
                id=b.id,
                guest_name=b.booking.guest_name or (b.guest.name if b.guest else "") or "Unknown Guest",
                room_type_name=b.room_type.name if b.room_type and b.room_type.name else "Unknown Room",
                created_at=b.created_at,
                booking_status=b.effective_status,
                total_amount=b.total_amount,
                check_in_date=b.booking.check_in_date,
            )
            for b in newest
        ]

    @staticmethod
    def booking_stats(bookings: list[StitchedBooking], as_of: datetime) -> BookingStats:
        """Counts for the bookings list, taken before any status tab is applied."""
        today = to_utc(as_of).date()
        return BookingStats(
            total_bookings=len(bookings),
            pending_bookings=sum(1 for b in bookings if b.effective_status == BookingStatus.PENDING),
            check_ins_today=sum(1 for b in bookings if b.booking.check_in_date == today),
            check_outs_today=sum(1 for b in bookings if b.booking.check_out_date == today),
        )

    @staticmethod
    def guest_stats(profiles: list[GuestProfile]) -> GuestStats:
        total = len(profiles)
        repeat = sum(1 for p in profiles if p.is_repeat)
        repeat_rate = (ratio(repeat, total) * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return GuestStats(
            total_guests=total,
            vip_guests=sum(1 for p in profiles if p.guest.status == GuestStatus.VIP),
            currently_staying=sum(1 for p in profiles if p.is_staying),
            repeat_guest_rate=int(repeat_rate),
        )

    @staticmethod
    def property_listings(
        properties: list[Property],
        room_types: list[RoomType],
        bookings: list[StitchedBooking],
    ) -> list[PropertyListing]:
        """Capacity and current occupancy per property."""
        rooms_by_property: dict[str, list[RoomType]] = defaultdict(list)
        for rt in room_types:
            if rt.property_id:
                rooms_by_property[rt.property_id].append(rt)

        occupied_by_property: dict[str, int] = defaultdict(int)
        for b in bookings:
            if b.effective_status == BookingStatus.CHECKED_IN and b.hotel is not None:
                occupied_by_property[b.hotel.id] += b.booking.rooms_booked

        return [
            PropertyListing(
                hotel=p,
                room_type_count=len(rooms_by_property.get(p.id, [])),
                total_rooms=total_rooms(rooms_by_property.get(p.id, [])),
                occupied_rooms=occupied_by_property.get(p.id, 0),
            )
            for p in properties
        ]

    @staticmethod
    def property_stats(listings: list[PropertyListing]) -> PropertyStats:
        rooms = sum(listing.total_rooms for listing in listings)
        occupied = sum(listing.occupied_rooms for listing in listings)
        return PropertyStats(
            total_properties=len(listings),
            active_properties=sum(1 for listing in listings if listing.hotel.status == PropertyStatus.ACTIVE),
            total_rooms=rooms,
            available_rooms=max(rooms - occupied, 0),
            occupancy_rate=ratio(occupied, rooms) * HUNDRED,
        )
