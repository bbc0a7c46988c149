"""Derive guest CRM attributes by scanning their bookings."""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from structlog import get_logger

from src.models.report import GuestProfile, StitchedBooking
from src.models.statuses import BookingStatus
from src.models.store import Guest

logger = get_logger(__name__)


class GuestStitcher:
    """Builds GuestProfile records (guest + derived booking attributes)."""

    @staticmethod
    def stitch(
        guests: list[Guest],
        bookings: Iterable[StitchedBooking],
    ) -> list[GuestProfile]:
        """Attach total_bookings, total_spent, last_visit and current stay to each guest.

        - total_bookings / total_spent: all bookings referencing the guest
        - last_visit: check-in date of the most recently created booking
        - current_booking_status / current_check_in: first booking (newest
          first) whose effective status is checked-in

        Args:
            guests: Guest rows, in display order
            bookings: Stitched bookings; guest_id links them to guests

        Returns:
            One GuestProfile per guest, in input order
        """
        by_guest: dict[str, list[StitchedBooking]] = defaultdict(list)
        for booking in bookings:
            if booking.booking.guest_id:
                by_guest[booking.booking.guest_id].append(booking)

        profiles: list[GuestProfile] = []
        for guest in guests:
            guest_bookings = sorted(
                by_guest.get(guest.id, []),
                key=lambda b: (b.created_at, b.id),
                reverse=True,
            )
            total_spent = sum((b.total_amount for b in guest_bookings), Decimal("0"))
            current = next(
                (b for b in guest_bookings if b.effective_status == BookingStatus.CHECKED_IN),
                None,
            )

            profiles.append(
                GuestProfile(
                    guest=guest,
                    total_bookings=len(guest_bookings),
                    total_spent=total_spent,
                    last_visit=guest_bookings[0].booking.check_in_date if guest_bookings else None,
                    current_booking_status=current.effective_status if current else None,
                    current_check_in=current.booking.check_in_date if current else None,
                )
            )

        logger.info(
            "Stitched guests",
            total_guests=len(profiles),
            guests_with_bookings=sum(1 for p in profiles if p.total_bookings),
        )
        return profiles
