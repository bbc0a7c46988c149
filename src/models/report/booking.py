"""Report models for stitched bookings and booking statistics."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.statuses import BookingStatus
from src.models.store import (
    Booking,
    BookingStatusEntry,
    Guest,
    Property,
    RefundRequest,
    RoomType,
)


class StitchedBooking(BaseModel):
    """A booking with its relations attached.

    Distinct from ``Booking`` so stitched and bare rows cannot be mixed up.
    Every relation is always present as a field; missing ones are None.
    """

    booking: Booking
    effective_status: BookingStatus = Field(
        alias="status",
        description="Latest status-history entry if any, else the stored status",
    )
    latest_status_entry: Optional[BookingStatusEntry] = Field(
        default=None, alias="latestStatusEntry"
    )
    guest: Optional[Guest] = None
    room_type: Optional[RoomType] = Field(default=None, alias="roomType")
    hotel: Optional[Property] = Field(default=None, alias="property")
    refund_request: Optional[RefundRequest] = Field(default=None, alias="refundRequest")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def id(self) -> str:
        return self.booking.id

    @property
    def total_amount(self) -> Decimal:
        return self.booking.total_amount

    @property
    def created_at(self) -> datetime:
        return self.booking.created_at

    @property
    def has_pending_refund(self) -> bool:
        """True when a refund request is waiting on the owner."""
        return (
            self.refund_request is not None
            and self.refund_request.status.value == "pending"
        )


class BookingStats(BaseModel):
    """Headline counts for the bookings list."""

    total_bookings: int = Field(default=0, alias="totalBookings")
    pending_bookings: int = Field(default=0, alias="pendingBookings")
    check_ins_today: int = Field(default=0, alias="checkInsToday")
    check_outs_today: int = Field(default=0, alias="checkOutsToday")

    model_config = ConfigDict(populate_by_name=True)


class RecentBooking(BaseModel):
    """Compact booking row for the dashboard feed."""

    id: str
    guest_name: str = Field(alias="guestName")
    room_type_name: str = Field(alias="roomTypeName")
    created_at: datetime = Field(alias="createdAt")
    booking_status: BookingStatus = Field(alias="bookingStatus")
    total_amount: Decimal = Field(alias="totalAmount")
    check_in_date: Optional[date] = Field(default=None, alias="checkInDate")

    model_config = ConfigDict(populate_by_name=True)


class BookingsReport(BaseModel):
    """Output of the bookings pipeline."""

    bookings: list[StitchedBooking] = Field(default_factory=list)
    stats: BookingStats = Field(default_factory=BookingStats)
    status_filter: Optional[BookingStatus] = Field(default=None, alias="statusFilter")

    model_config = ConfigDict(populate_by_name=True)
