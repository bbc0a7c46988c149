"""Report models for the guest CRM."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.statuses import BookingStatus
from src.models.store import Guest


class GuestProfile(BaseModel):
    """A guest with attributes derived from their bookings."""

    guest: Guest
    total_bookings: int = Field(default=0, alias="totalBookings")
    total_spent: Decimal = Field(default=Decimal("0"), alias="totalSpent")
    last_visit: Optional[date] = Field(
        default=None,
        alias="lastVisit",
        description="Check-in date of the most recently created booking",
    )
    current_booking_status: Optional[BookingStatus] = Field(
        default=None, alias="currentBookingStatus"
    )
    current_check_in: Optional[date] = Field(default=None, alias="currentCheckIn")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_staying(self) -> bool:
        return self.current_booking_status == BookingStatus.CHECKED_IN

    @property
    def is_repeat(self) -> bool:
        return self.total_bookings > 1


class GuestStats(BaseModel):
    """Headline counts for the guest CRM."""

    total_guests: int = Field(default=0, alias="totalGuests")
    vip_guests: int = Field(default=0, alias="vipGuests")
    currently_staying: int = Field(default=0, alias="currentlyStaying")
    repeat_guest_rate: int = Field(default=0, alias="repeatGuestRate")

    model_config = ConfigDict(populate_by_name=True)


class GuestsReport(BaseModel):
    """Output of the guests pipeline."""

    guests: list[GuestProfile] = Field(default_factory=list)
    stats: GuestStats = Field(default_factory=GuestStats)

    model_config = ConfigDict(populate_by_name=True)
