"""Bucket dated amounts into the twelve calendar months of a year."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from structlog import get_logger

from src.models.report import MonthlyBucket, StitchedBooking
from src.models.statuses import FinanceEntryType
from src.models.store import ManualFinanceEntry

logger = get_logger(__name__)

MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

ZERO = Decimal("0")


class MonthlyAggregator:
    """Accumulates named sums into twelve zero-filled month buckets.

    Buckets always exist in calendar order, whatever the input. Callers add
    amounts with ``add`` and compute derived fields once with ``finalize``.
    Only ``when.month`` is used here; callers keep other years out.
    """

    def __init__(self, fields: Iterable[str]):
        self.fields = tuple(fields)
        self.buckets: list[dict[str, Any]] = [
            {"month": name, **{field: ZERO for field in self.fields}}
            for name in MONTHS
        ]

    def add(self, when: date | datetime, **amounts: Any) -> None:
        """Accumulate amounts into the bucket for ``when``'s month.

        Raises:
            KeyError: If an amount names a field the aggregator was not built with
        """
        bucket = self.buckets[when.month - 1]
        for field, amount in amounts.items():
            if field not in self.fields:
                raise KeyError(f"Unknown aggregate field: {field}")
            bucket[field] += amount

    def finalize(
        self, derived: dict[str, Callable[[dict[str, Any]], Any]] | None = None
    ) -> list[dict[str, Any]]:
        """Compute derived fields for every bucket and return the buckets."""
        for bucket in self.buckets:
            for field, compute in (derived or {}).items():
                bucket[field] = compute(bucket)
        return self.buckets


def aggregate_finances(
    bookings: Iterable[StitchedBooking],
    manual_entries: Iterable[ManualFinanceEntry],
    commission_rate: Decimal,
    year: Optional[int] = None,
) -> list[MonthlyBucket]:
    """Build the monthly finance buckets for one report year.

    Bookings land in the month they were created; manual entries in the
    month of their ledger date. Expenses accumulate as absolute values.

    Args:
        bookings: Stitched bookings
        manual_entries: Manual ledger lines
        commission_rate: Platform commission as a fraction (0.10 = 10 %)
        year: Report year; records dated in any other year are skipped

    Returns:
        Twelve MonthlyBucket records, Jan to Dec
    """
    aggregator = MonthlyAggregator(
        ["revenue", "commission", "net", "bookings", "manualIncome", "manualExpenses"]
    )

    skipped = 0
    booking_count = 0
    for booking in bookings:
        if year is not None and booking.created_at.year != year:
            skipped += 1
            continue
        amount = booking.total_amount
        commission = amount * commission_rate
        aggregator.add(
            booking.created_at,
            revenue=amount,
            commission=commission,
            net=amount - commission,
            bookings=1,
        )
        booking_count += 1

    entry_count = 0
    for entry in manual_entries:
        if year is not None and entry.entry_date.year != year:
            skipped += 1
            continue
        if entry.type == FinanceEntryType.INCOME:
            aggregator.add(entry.entry_date, manualIncome=entry.amount)
        else:
            aggregator.add(entry.entry_date, manualExpenses=abs(entry.amount))
        entry_count += 1

    buckets = aggregator.finalize({
        "bookings": lambda b: int(b["bookings"]),
        "manualNet": lambda b: b["manualIncome"] - b["manualExpenses"],
        "combinedRevenue": lambda b: b["revenue"] + b["manualIncome"],
        "combinedNet": lambda b: b["net"] + b["manualIncome"] - b["manualExpenses"],
    })

    logger.info(
        "Aggregated monthly finances",
        booking_count=booking_count,
        manual_entry_count=entry_count,
        skipped_other_years=skipped,
    )

    return [MonthlyBucket(**bucket) for bucket in buckets]
