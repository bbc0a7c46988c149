"""Status vocabularies used across stored rows and reports."""

from enum import Enum


class BookingStatus(str, Enum):
    """Booking lifecycle status.

    Stored values are hyphenated. Some rows carry the underscore spelling
    (``checked_in``); ``BookingStatusMapper.normalize`` folds those in.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    PAY_AT_HOTEL = "pay-at-hotel"


class RefundStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"
    FAILED = "failed"


class GuestStatus(str, Enum):
    NEW = "new"
    REGULAR = "regular"
    VIP = "vip"


class PropertyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING_APPROVAL = "pending_approval"


class FinanceEntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


# Bookings in these states count as occupying a room
OCCUPYING_STATUSES = frozenset({BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT})


class BookingStatusMapper:
    """Maps raw status strings from the store to ``BookingStatus``."""

    @staticmethod
    def normalize(raw_status: str | None) -> BookingStatus:
        """Normalize a raw booking status string.

        Mapping logic:
        - case and surrounding whitespace are ignored
        - "_" and " " are treated as "-" ("checked_in" -> CHECKED_IN)
        - "canceled" (US spelling) -> CANCELLED
        - empty / unknown -> PENDING

        Args:
            raw_status: Status string as stored (may be None)

        Returns:
            BookingStatus member
        """
        if not raw_status:
            return BookingStatus.PENDING

        key = raw_status.strip().lower().replace("_", "-").replace(" ", "-")
        if key == "canceled":
            key = BookingStatus.CANCELLED.value

        try:
            return BookingStatus(key)
        except ValueError:
            return BookingStatus.PENDING
