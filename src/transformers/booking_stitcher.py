"""Attach related rows to bookings without further queries."""

from typing import Iterable, Optional

from structlog import get_logger

from src.models.report import StitchedBooking
from src.models.store import (
    Booking,
    BookingStatusEntry,
    Guest,
    Property,
    RefundRequest,
    RoomType,
)

logger = get_logger(__name__)


class BookingStitcher:
    """Joins flat result sets onto bookings by building id lookup maps."""

    @staticmethod
    def latest_status_entries(
        history: Iterable[BookingStatusEntry],
    ) -> dict[str, BookingStatusEntry]:
        """Pick the latest status-history entry per booking.

        Entries are sorted explicitly by (created_at, id) descending and the
        first per booking wins, so the result never depends on the order the
        store returned them in. Identical timestamps fall back to the higher id.

        Args:
            history: Status history rows for any number of bookings

        Returns:
            Mapping of booking id to its latest entry
        """
        latest: dict[str, BookingStatusEntry] = {}
        ordered = sorted(history, key=lambda e: (e.created_at, e.id), reverse=True)
        for entry in ordered:
            if entry.booking_id not in latest:
                latest[entry.booking_id] = entry
        return latest

    @staticmethod
    def stitch(
        bookings: list[Booking],
        guests: Iterable[Guest] = (),
        room_types: Iterable[RoomType] = (),
        properties: Iterable[Property] = (),
        status_history: Iterable[BookingStatusEntry] = (),
        refund_requests: Iterable[RefundRequest] = (),
    ) -> list[StitchedBooking]:
        """Attach guest, room type, property, latest status and refund to each booking.

        Output has exactly one record per input booking, in input order.
        Relations that cannot be resolved are attached as None.

        Args:
            bookings: Primary rows
            guests: Guest rows (looked up by booking.guest_id)
            room_types: Room type rows (looked up by booking.room_type_id)
            properties: Property rows (looked up via room_type.property_id)
            status_history: Status history rows, any order
            refund_requests: Refund rows (looked up by booking id)

        Returns:
            List of StitchedBooking
        """
        guests_map = {g.id: g for g in guests}
        room_types_map = {rt.id: rt for rt in room_types}
        properties_map = {p.id: p for p in properties}
        refunds_map = {r.booking_id: r for r in refund_requests}
        status_map = BookingStitcher.latest_status_entries(status_history)

        stitched: list[StitchedBooking] = []
        unresolved_properties = 0

        for booking in bookings:
            room_type = room_types_map.get(booking.room_type_id) if booking.room_type_id else None
            hotel: Optional[Property] = None
            if room_type is not None and room_type.property_id:
                hotel = properties_map.get(room_type.property_id)
            if hotel is None:
                unresolved_properties += 1

            status_entry = status_map.get(booking.id)
            effective_status = status_entry.status if status_entry else booking.status

            stitched.append(
                StitchedBooking(
                    booking=booking,
                    effective_status=effective_status,
                    latest_status_entry=status_entry,
                    guest=guests_map.get(booking.guest_id) if booking.guest_id else None,
                    room_type=room_type,
                    hotel=hotel,
                    refund_request=refunds_map.get(booking.id),
                )
            )

        logger.info(
            "Stitched bookings",
            total_bookings=len(bookings),
            status_overrides=sum(1 for b in stitched if b.latest_status_entry is not None),
            unresolved_properties=unresolved_properties,
        )

        return stitched
