"""Unit tests for the stitchers, aggregator, metrics, filters and formatting."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from src.models.report import GuestProfile, MonthlyBucket, PropertyListing
from src.models.statuses import (
    BookingStatus,
    BookingStatusMapper,
    FinanceEntryType,
    GuestStatus,
    PropertyStatus,
)
from src.models.store import (
    Booking,
    BookingStatusEntry,
    Guest,
    ManualFinanceEntry,
    Property,
    RoomType,
)
from src.transformers import (
    MONTHS,
    BookingStitcher,
    GuestStitcher,
    MetricCalculator,
    MonthlyAggregator,
    aggregate_finances,
    filter_bookings,
    filter_guests,
    filter_properties,
    format_money,
    format_percent,
    format_rating,
    growth_rate,
    ratio,
)
from tests.support import AS_OF


def make_booking(booking_id: str, **fields) -> Booking:
    row = {
        "id": booking_id,
        "created_at": "2025-01-15T10:00:00+00:00",
        "total_amount": 0,
        **fields,
    }
    return Booking(**row)


def make_entry(entry_id: str, entry_type: str, amount, entry_date: str) -> ManualFinanceEntry:
    return ManualFinanceEntry(
        id=entry_id,
        title=f"Entry {entry_id}",
        amount=amount,
        type=entry_type,
        category="Other",
        date=entry_date,
    )


class TestBookingStatusMapper:
    """Tests for BookingStatusMapper."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("checked_in", BookingStatus.CHECKED_IN),
            ("Checked-Out", BookingStatus.CHECKED_OUT),
            (" confirmed ", BookingStatus.CONFIRMED),
            ("canceled", BookingStatus.CANCELLED),
            (None, BookingStatus.PENDING),
            ("on-hold", BookingStatus.PENDING),
        ],
    )
    def test_normalize(self, raw, expected):
        assert BookingStatusMapper.normalize(raw) == expected

    def test_booking_reads_legacy_status_column(self):
        booking = make_booking("b1", status=None, booking_status="checked_out")
        assert booking.status == BookingStatus.CHECKED_OUT

    def test_naive_created_at_is_treated_as_utc(self):
        booking = make_booking("b1", created_at="2025-03-01T10:00:00")
        assert booking.created_at.tzinfo is not None
        assert booking.created_at == datetime(2025, 3, 1, 10, tzinfo=timezone.utc)


class TestBookingStitcher:
    """Tests for BookingStitcher."""

    def test_output_cardinality_matches_input(self, stitched_bookings, store_tables):
        assert len(stitched_bookings) == len(store_tables["bookings"])
        assert [b.id for b in stitched_bookings] == [row["id"] for row in store_tables["bookings"]]

    def test_stitch_with_no_relations_attaches_none(self):
        bookings = [make_booking("b1", guest_id="g-missing", room_type_id="rt-missing")]

        stitched = BookingStitcher.stitch(bookings)

        assert len(stitched) == 1
        assert stitched[0].guest is None
        assert stitched[0].room_type is None
        assert stitched[0].hotel is None
        assert stitched[0].refund_request is None
        assert stitched[0].effective_status == BookingStatus.PENDING

    def test_relations_resolve_transitively(self, stitched_bookings):
        b2 = next(b for b in stitched_bookings if b.id == "b2")

        assert b2.guest.name == "Asha Verma"
        assert b2.room_type.name == "Suite"
        assert b2.hotel.name == "Sea View Resort"

    def test_latest_history_entry_overrides_stored_status(self, stitched_bookings):
        b2 = next(b for b in stitched_bookings if b.id == "b2")

        assert b2.booking.status == BookingStatus.CONFIRMED
        assert b2.effective_status == BookingStatus.CHECKED_IN

    def test_identical_timestamps_break_ties_by_id(self, stitched_bookings):
        b4 = next(b for b in stitched_bookings if b.id == "b4")

        assert b4.latest_status_entry.id == "s3"
        assert b4.effective_status == BookingStatus.CANCELLED

    def test_latest_entry_does_not_depend_on_input_order(self):
        entries = [
            BookingStatusEntry(id="e1", booking_id="b1", status="confirmed", created_at="2025-01-01T10:00:00+00:00"),
            BookingStatusEntry(id="e2", booking_id="b1", status="checked-in", created_at="2025-01-02T10:00:00+00:00"),
            BookingStatusEntry(id="e3", booking_id="b1", status="checked-out", created_at="2025-01-03T10:00:00+00:00"),
        ]

        forward = BookingStitcher.latest_status_entries(entries)
        backward = BookingStitcher.latest_status_entries(list(reversed(entries)))

        assert forward["b1"].id == backward["b1"].id == "e3"

    def test_pending_refund_is_attached(self, stitched_bookings):
        b4 = next(b for b in stitched_bookings if b.id == "b4")

        assert b4.has_pending_refund
        assert b4.refund_request.amount_requested_to_refund == Decimal("2500")


class TestGuestStitcher:
    """Tests for GuestStitcher."""

    def test_guest_with_three_bookings_one_checked_in(self, stitched_bookings, store_tables):
        guests = [Guest(**row) for row in store_tables["guests"]]

        profiles = {p.guest.id: p for p in GuestStitcher.stitch(guests, stitched_bookings)}
        asha = profiles["g1"]

        assert asha.total_bookings == 3
        assert asha.current_booking_status == BookingStatus.CHECKED_IN
        assert asha.current_check_in == date(2025, 6, 12)
        assert asha.total_spent == Decimal("30000")

    def test_last_visit_is_check_in_of_most_recently_created_booking(self, stitched_bookings, store_tables):
        guests = [Guest(**row) for row in store_tables["guests"]]

        profiles = {p.guest.id: p for p in GuestStitcher.stitch(guests, stitched_bookings)}

        # b1 was created last even though b2 checked in earlier
        assert profiles["g1"].last_visit == date(2025, 6, 15)

    def test_guest_without_bookings(self):
        guest = Guest(id="g9", name="Nobody", email="nobody@example.com")

        profiles = GuestStitcher.stitch([guest], [])

        assert profiles[0].total_bookings == 0
        assert profiles[0].total_spent == Decimal("0")
        assert profiles[0].last_visit is None
        assert profiles[0].current_booking_status is None


class TestMonthlyAggregator:
    """Tests for MonthlyAggregator and aggregate_finances."""

    def test_twelve_buckets_for_empty_input(self):
        buckets = aggregate_finances([], [], Decimal("0.10"))

        assert [b.month for b in buckets] == list(MONTHS)
        assert all(b.revenue == 0 and b.bookings == 0 and b.combined_net == 0 for b in buckets)

    def test_unknown_field_is_rejected(self):
        aggregator = MonthlyAggregator(["revenue"])

        with pytest.raises(KeyError):
            aggregator.add(date(2025, 1, 1), refunds=Decimal("1"))

    def test_manual_income_and_expense(self):
        entries = [
            make_entry("m1", "income", 1000, "2025-03-15"),
            make_entry("m2", "expense", -400, "2025-03-20"),
        ]

        march = aggregate_finances([], entries, Decimal("0.10"))[2]

        assert march.manual_income == Decimal("1000")
        assert march.manual_expenses == Decimal("400")
        assert march.manual_net == Decimal("600")

    def test_positive_expense_is_also_subtracted(self):
        entries = [make_entry("m1", "expense", "250.50", "2025-08-01")]

        august = aggregate_finances([], entries, Decimal("0.10"))[7]

        assert august.manual_expenses == Decimal("250.50")
        assert august.combined_net == Decimal("-250.50")

    def test_commission_and_net(self):
        stitched = BookingStitcher.stitch(
            [make_booking("b1", total_amount=10000, created_at="2025-05-04T09:00:00+00:00")]
        )

        may = aggregate_finances(stitched, [], Decimal("0.10"))[4]

        assert may.revenue == Decimal("10000")
        assert may.commission == Decimal("1000")
        assert may.net == Decimal("9000")
        assert may.bookings == 1
        assert may.combined_revenue == Decimal("10000")

    def test_fixture_year(self, stitched_bookings, store_tables):
        this_year = [b for b in stitched_bookings if b.created_at.year == 2025]
        entries = [
            ManualFinanceEntry(**row)
            for row in store_tables["manual_finances"]
            if row["date"] >= "2025-01-01"
        ]

        buckets = aggregate_finances(this_year, entries, Decimal("0.10"))
        june = buckets[5]

        assert june.bookings == 3
        assert june.revenue == Decimal("37000")
        assert june.net == Decimal("33300")
        assert june.manual_expenses == Decimal("600")
        assert june.combined_net == Decimal("32700")
        assert sum(b.bookings for b in buckets) == 5

    def test_records_outside_report_year_are_skipped(self, stitched_bookings, store_tables):
        entries = [ManualFinanceEntry(**row) for row in store_tables["manual_finances"]]

        buckets = aggregate_finances(stitched_bookings, entries, Decimal("0.10"), year=2024)

        assert sum(b.bookings for b in buckets) == 1
        assert buckets[11].revenue == Decimal("7000")
        assert buckets[10].manual_income == Decimal("2000")
        assert buckets[2].manual_income == 0
        assert buckets[5].revenue == 0


class TestMetricCalculator:
    """Tests for MetricCalculator."""

    def test_ratio_and_growth_with_zero_denominator(self):
        assert ratio(10, 0) == 0
        assert growth_rate(5, 0) == 0
        assert growth_rate(3, 2) == Decimal("50")

    def test_zero_denominators_yield_zero(self):
        totals = MetricCalculator.finance_totals(aggregate_finances([], [], Decimal("0.10")))

        metrics = MetricCalculator.finance_metrics(totals, [], [], [])

        assert metrics.occupancy_rate == 0
        assert metrics.average_daily_rate == 0
        assert metrics.average_rev_par == 0
        assert metrics.guest_rating == 0
        assert metrics.pending_payouts == 0

    def test_occupancy_counts_missing_room_totals_as_one(self, stitched_bookings):
        room_types = [RoomType(id="rt1", total_rooms=None), RoomType(id="rt2", total_rooms=0)]
        occupying = [b for b in stitched_bookings if b.id in ("b2", "b3")]

        # 2 occupied / (2 rooms x 30 days)
        rate = MetricCalculator.occupancy_rate(occupying, room_types)

        assert rate == ratio(2, 60) * 100

    def test_dashboard_stats(self, stitched_bookings):
        stats = MetricCalculator.dashboard_stats(stitched_bookings, AS_OF)

        assert stats.total_bookings == 5
        assert stats.total_revenue == Decimal("52000")
        assert stats.check_ins_today == 1
        assert stats.pending_check_ins == 1
        assert stats.check_outs_today == 1
        assert stats.pending_check_outs == 1
        assert stats.booking_growth == Decimal("200")
        assert stats.revenue_growth == Decimal("362.5")

    def test_recent_bookings_fall_back_to_guest_name(self, stitched_bookings):
        recent = MetricCalculator.recent_bookings(stitched_bookings)

        assert [r.id for r in recent] == ["b5", "b1", "b2"]
        assert recent[0].guest_name == "Priya Nair"
        assert recent[0].room_type_name == "Deluxe Room"

    def test_recent_bookings_unknown_placeholders(self):
        recent = MetricCalculator.recent_bookings(BookingStitcher.stitch([make_booking("b1")]))

        assert recent[0].guest_name == "Unknown Guest"
        assert recent[0].room_type_name == "Unknown Room"

    def test_booking_stats(self, stitched_bookings):
        stats = MetricCalculator.booking_stats(stitched_bookings, AS_OF)

        assert stats.total_bookings == 6
        assert stats.pending_bookings == 1
        assert stats.check_ins_today == 1
        assert stats.check_outs_today == 1

    def test_repeat_guest_rate_rounds_half_up(self):
        def profile(guest_id, bookings):
            return GuestProfile(guest=Guest(id=guest_id), total_bookings=bookings)

        # 1 of 8 guests -> 12.5 -> 13
        profiles = [profile("g0", 2)] + [profile(f"g{i}", 1) for i in range(1, 8)]

        assert MetricCalculator.guest_stats(profiles).repeat_guest_rate == 13
        assert MetricCalculator.guest_stats([]).repeat_guest_rate == 0

    def test_payout_schedule(self):
        monthly = [MonthlyBucket(month=m, combined_net=Decimal(i * 100)) for i, m in enumerate(MONTHS)]

        payouts = MetricCalculator.payout_schedule(monthly, 2025)

        assert [p.id for p in payouts] == ["PO003", "PO002", "PO001"]
        assert [p.status for p in payouts] == ["paid", "processing", "pending"]
        assert payouts[0].period == "Dec 2025"
        assert payouts[0].payout_date == date(2026, 1, 5)
        assert payouts[2].payout_date == date(2025, 11, 5)
        assert payouts[0].amount == Decimal("1100")

    def test_revenue_breakdown(self):
        totals = MetricCalculator.finance_totals(
            [MonthlyBucket(month="Jan", revenue=Decimal("1000"), manual_income=Decimal("50"))]
        )

        breakdown = {item.name: item.value for item in MetricCalculator.revenue_breakdown(totals)}

        assert breakdown == {
            "Room Revenue": Decimal("750"),
            "F&B": Decimal("150"),
            "Extras": Decimal("100"),
            "Manual Income": Decimal("50"),
        }

    def test_property_listings_and_stats(self, stitched_bookings, store_tables):
        properties = [Property(**row) for row in store_tables["hotels"]]
        room_types = [RoomType(**row) for row in store_tables["room_types"]]

        listings = MetricCalculator.property_listings(properties, room_types, stitched_bookings)
        stats = MetricCalculator.property_stats(listings)

        assert [(l.room_type_count, l.total_rooms, l.occupied_rooms) for l in listings] == [(2, 15, 1), (1, 1, 0)]
        assert stats.total_properties == 2
        assert stats.active_properties == 1
        assert stats.total_rooms == 16
        assert stats.available_rooms == 15
        assert stats.occupancy_rate == Decimal("6.25")


class TestFilters:
    """Tests for the list filters."""

    def test_booking_status_tab_uses_effective_status(self, stitched_bookings):
        checked_in = filter_bookings(stitched_bookings, status=BookingStatus.CHECKED_IN)

        assert [b.id for b in checked_in] == ["b2"]

    def test_booking_search_matches_guest_email_case_insensitive(self, stitched_bookings):
        found = filter_bookings(stitched_bookings, search="PRIYA@")

        assert [b.id for b in found] == ["b5"]

    def test_booking_today_range(self, stitched_bookings):
        today = filter_bookings(stitched_bookings, date_range="today", today=AS_OF.date())

        assert {b.id for b in today} == {"b1", "b2"}

    def test_booking_month_range(self, stitched_bookings):
        upcoming = filter_bookings(stitched_bookings, date_range="month", today=AS_OF.date())

        assert {b.id for b in upcoming} == {"b1", "b5"}

    def test_unknown_date_range(self, stitched_bookings):
        with pytest.raises(ValueError):
            filter_bookings(stitched_bookings, date_range="year")

    def test_guest_sorts(self):
        profiles = [
            GuestProfile(guest=Guest(id="g1", name="zara"), total_bookings=1, total_spent=Decimal("900")),
            GuestProfile(guest=Guest(id="g2", name="Amit"), total_bookings=4, total_spent=Decimal("100")),
        ]

        assert [p.guest.id for p in filter_guests(profiles, sort_by="name")] == ["g2", "g1"]
        assert [p.guest.id for p in filter_guests(profiles, sort_by="bookings")] == ["g2", "g1"]
        assert [p.guest.id for p in filter_guests(profiles, sort_by="spent")] == ["g1", "g2"]

    def test_guest_status_tab_and_search(self):
        profiles = [
            GuestProfile(guest=Guest(id="g1", name="Asha", email="asha@example.com", status="vip")),
            GuestProfile(guest=Guest(id="g2", name="Rahul", email="rahul@example.com", status="regular")),
        ]

        assert [p.guest.id for p in filter_guests(profiles, status=GuestStatus.VIP)] == ["g1"]
        assert [p.guest.id for p in filter_guests(profiles, search="RAHUL")] == ["g2"]

    def test_property_search_by_city_and_type(self, store_tables):
        listings = [PropertyListing(hotel=Property(**row)) for row in store_tables["hotels"]]

        assert [l.hotel.id for l in filter_properties(listings, search="manali")] == ["h2"]
        assert [l.hotel.id for l in filter_properties(listings, search="resort")] == ["h1"]
        assert [l.hotel.id for l in filter_properties(listings, status=PropertyStatus.INACTIVE)] == ["h2"]


class TestFormatting:
    """Tests for display formatting."""

    def test_money_uses_indian_grouping_and_whole_units(self):
        assert format_money(Decimal("1234567.49")) == "₹12,34,567"
        assert format_money(Decimal("999.5")) == "₹1,000"
        assert format_money(Decimal("0")) == "₹0"

    def test_percent(self):
        assert format_percent(Decimal("362.5")) == "362.5%"
        assert format_percent(Decimal("33.333"), digits=0) == "33%"

    def test_rating(self):
        assert format_rating(Decimal("4")) == "4.0"


def test_finance_entry_type_categories():
    from src.models.store import categories_for

    assert "Utilities" in categories_for(FinanceEntryType.EXPENSE)
    assert "Utilities" not in categories_for(FinanceEntryType.INCOME)
