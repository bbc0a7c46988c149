"""Pydantic models for booking, status history and refund rows."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.models.statuses import (
    BookingStatus,
    BookingStatusMapper,
    PaymentStatus,
    RefundStatus,
)
from src.models.store.fields import parse_amount, parse_date, to_utc


class Booking(BaseModel):
    """Booking row as stored (``bookings`` table).

    ``status`` is the stored status only. The effective status, which may be
    overridden by the status history, lives on ``StitchedBooking``.
    """

    id: str
    guest_id: Optional[str] = None
    room_type_id: Optional[str] = None
    guest_name: Optional[str] = None
    check_in_date: Optional[date] = None
    check_in_time: Optional[str] = None
    check_out_date: Optional[date] = None
    check_out_time: Optional[str] = None
    adults: int = 0
    children: int = 0
    rooms_booked: int = 1
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    total_amount: Decimal = Field(default=Decimal("0"))
    advance_amount: Decimal = Field(default=Decimal("0"))
    special_requests: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def legacy_status_column(cls, data):
        """Older rows keep the status in ``booking_status`` instead of ``status``."""
        if isinstance(data, dict) and not data.get("status") and data.get("booking_status"):
            data = {**data, "status": data["booking_status"]}
        return data

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return BookingStatusMapper.normalize(v)

    @field_validator("payment_status", mode="before")
    @classmethod
    def parse_payment_status(cls, v):
        try:
            return PaymentStatus(v)
        except ValueError:
            return PaymentStatus.PENDING

    @field_validator("total_amount", "advance_amount", mode="before")
    @classmethod
    def parse_amounts(cls, v):
        return parse_amount(v)

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def parse_stay_dates(cls, v):
        return parse_date(v)

    @field_validator("adults", "children", mode="before")
    @classmethod
    def parse_counts(cls, v):
        return v or 0

    @field_validator("rooms_booked", mode="before")
    @classmethod
    def parse_rooms_booked(cls, v):
        return v or 1

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v):
        return to_utc(v)


class BookingStatusEntry(BaseModel):
    """Status history row (``booking_status`` table). Append only."""

    id: str
    booking_id: str
    status: BookingStatus
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return BookingStatusMapper.normalize(v)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v):
        return to_utc(v)


class RefundRequest(BaseModel):
    """Refund request row (``refund_requests`` table), zero or one per booking."""

    id: str
    booking_id: str
    status: RefundStatus = RefundStatus.PENDING
    amount_requested_to_refund: Decimal = Field(default=Decimal("0"))

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("amount_requested_to_refund", mode="before")
    @classmethod
    def parse_refund_amount(cls, v):
        return parse_amount(v)
