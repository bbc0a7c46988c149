"""Search, tab and sort filters applied to report rows after stitching."""

from datetime import date, timedelta
from typing import Optional

from src.models.report import GuestProfile, PropertyListing, StitchedBooking
from src.models.statuses import BookingStatus, GuestStatus, PropertyStatus

DATE_RANGES = ("all", "today", "week", "month")
GUEST_SORTS = ("recent", "name", "bookings", "spent")


def _add_month(day: date) -> date:
    """Same day next month, clamped to the month's end."""
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    for candidate in (day.day, 30, 29, 28):
        try:
            return date(year, month, candidate)
        except ValueError:
            continue
    raise ValueError(f"Cannot advance {day} by one month")


def _contains(value: Optional[str], term: str) -> bool:
    return bool(value) and term in value.lower()


def filter_bookings(
    bookings: list[StitchedBooking],
    status: Optional[BookingStatus] = None,
    search: str = "",
    date_range: str = "all",
    today: Optional[date] = None,
) -> list[StitchedBooking]:
    """Apply the status tab, free-text search and stay date range.

    - status matches the effective status
    - search matches guest name, booking id or guest email, case insensitive
    - date_range: ``today`` (arriving, leaving or staying), ``week`` / ``month``
      (arriving within the next 7 days / next month)
    """
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range: {date_range}")

    term = search.strip().lower()
    today = today or date.today()
    result = []

    for b in bookings:
        if status is not None and b.effective_status != status:
            continue

        if term:
            guest = b.guest
            if not (
                _contains(guest.name if guest else None, term)
                or _contains(b.id, term)
                or _contains(guest.email if guest else None, term)
            ):
                continue

        if date_range != "all":
            check_in = b.booking.check_in_date
            check_out = b.booking.check_out_date
            if date_range == "today":
                staying = check_in is not None and check_out is not None and check_in <= today <= check_out
                if not (check_in == today or check_out == today or staying):
                    continue
            else:
                horizon = today + timedelta(days=7) if date_range == "week" else _add_month(today)
                if check_in is None or not today <= check_in <= horizon:
                    continue

        result.append(b)

    return result


def filter_guests(
    profiles: list[GuestProfile],
    search: str = "",
    status: Optional[GuestStatus] = None,
    sort_by: str = "recent",
) -> list[GuestProfile]:
    """Search by name or email, filter by guest status tab, then sort.

    Sorts: ``recent`` (created newest first), ``name`` (A-Z), ``bookings``
    and ``spent`` (highest first).
    """
    if sort_by not in GUEST_SORTS:
        raise ValueError(f"Unknown guest sort: {sort_by}")

    term = search.strip().lower()
    matches = [
        p for p in profiles
        if (not term or _contains(p.guest.name, term) or _contains(p.guest.email, term))
        and (status is None or p.guest.status == status)
    ]

    if sort_by == "name":
        return sorted(matches, key=lambda p: p.guest.name.lower())
    if sort_by == "bookings":
        return sorted(matches, key=lambda p: p.total_bookings, reverse=True)
    if sort_by == "spent":
        return sorted(matches, key=lambda p: p.total_spent, reverse=True)
    # Guests without a creation time sort last
    dated = [p for p in matches if p.guest.created_at is not None]
    undated = [p for p in matches if p.guest.created_at is None]
    return sorted(dated, key=lambda p: p.guest.created_at, reverse=True) + undated


def filter_properties(
    listings: list[PropertyListing],
    search: str = "",
    status: Optional[PropertyStatus] = None,
) -> list[PropertyListing]:
    """Search by name, city or property type and filter by status tab."""
    term = search.strip().lower()
    return [
        listing for listing in listings
        if (
            not term
            or _contains(listing.hotel.name, term)
            or _contains(listing.hotel.city, term)
            or _contains(listing.hotel.property_type, term)
        )
        and (status is None or listing.hotel.status == status)
    ]
