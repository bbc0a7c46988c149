"""Owner-scoped reads from the relational store."""

import asyncio
from datetime import date, datetime
from typing import Iterable, Optional

from structlog import get_logger

from src.clients import StoreClient, StoreQuery
from src.models.store import (
    Booking,
    BookingStatusEntry,
    Guest,
    ManualFinanceEntry,
    OwnerKyc,
    OwnerProfile,
    Property,
    RefundRequest,
    RoomType,
)

logger = get_logger(__name__)


def _unique(ids: Iterable[Optional[str]]) -> list[str]:
    """Distinct non-empty ids, in first-seen order."""
    return list(dict.fromkeys(i for i in ids if i))


class EntityFetcher:
    """Issues the filtered queries behind every report.

    An empty id list at any level short-circuits to an empty result without
    touching the store.
    """

    def __init__(self, store_client: StoreClient, access_token: Optional[str]):
        """Initialize the fetcher.

        Args:
            store_client: Relational store client
            access_token: Owner session token; row-level security scopes every read
        """
        self.store_client = store_client
        self.access_token = access_token

    async def _select(self, query: StoreQuery) -> list[dict]:
        return await self.store_client.select(query, self.access_token)

    async def fetch_properties(self, owner_id: str) -> list[Property]:
        rows = await self._select(StoreQuery("hotels").eq("owner_id", owner_id))
        return [Property(**row) for row in rows]

    async def fetch_room_types(self, property_ids: Iterable[str]) -> list[RoomType]:
        ids = _unique(property_ids)
        if not ids:
            return []
        rows = await self._select(StoreQuery("room_types").in_("property_id", ids))
        return [RoomType(**row) for row in rows]

    async def fetch_bookings(
        self,
        room_type_ids: Iterable[str],
        created_since: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        require_guest: bool = False,
    ) -> list[Booking]:
        """Bookings on the given room types, newest first.

        Args:
            room_type_ids: Owner's room types
            created_since: Lower bound on created_at (inclusive)
            created_before: Upper bound on created_at (exclusive)
            require_guest: Only bookings linked to a guest row

        Returns:
            List of Booking
        """
        ids = _unique(room_type_ids)
        if not ids:
            return []

        query = StoreQuery("bookings").in_("room_type_id", ids)
        if created_since is not None:
            query.gte("created_at", created_since.isoformat())
        if created_before is not None:
            query.lt("created_at", created_before.isoformat())
        if require_guest:
            query.not_null("guest_id")
        query.order("created_at")

        rows = await self._select(query)
        return [Booking(**row) for row in rows]

    async def fetch_guests(self, guest_ids: Iterable[Optional[str]]) -> list[Guest]:
        ids = _unique(guest_ids)
        if not ids:
            return []
        rows = await self._select(StoreQuery("guests").in_("id", ids).order("created_at"))
        return [Guest(**row) for row in rows]

    async def fetch_properties_by_id(self, property_ids: Iterable[Optional[str]]) -> list[Property]:
        ids = _unique(property_ids)
        if not ids:
            return []
        rows = await self._select(StoreQuery("hotels").in_("id", ids))
        return [Property(**row) for row in rows]

    async def fetch_status_history(self, booking_ids: Iterable[str]) -> list[BookingStatusEntry]:
        ids = _unique(booking_ids)
        if not ids:
            return []
        # Order here is informational only; the stitcher sorts explicitly
        rows = await self._select(
            StoreQuery("booking_status").in_("booking_id", ids).order("created_at")
        )
        return [BookingStatusEntry(**row) for row in rows]

    async def fetch_refund_requests(self, booking_ids: Iterable[str]) -> list[RefundRequest]:
        ids = _unique(booking_ids)
        if not ids:
            return []
        rows = await self._select(
            StoreQuery(
                "refund_requests",
                select="id,booking_id,status,amount_requested_to_refund",
            ).in_("booking_id", ids)
        )
        return [RefundRequest(**row) for row in rows]

    async def fetch_booking_relations(
        self,
        bookings: list[Booking],
        room_types: list[RoomType],
    ) -> tuple[list[Guest], list[Property], list[BookingStatusEntry], list[RefundRequest]]:
        """Fetch guests, properties, status history and refunds concurrently.

        The four queries are independent once booking ids are known; all of
        them must finish before stitching starts.

        Returns:
            (guests, properties, status_history, refund_requests)
        """
        booking_ids = [b.id for b in bookings]
        guests, properties, history, refunds = await asyncio.gather(
            self.fetch_guests(b.guest_id for b in bookings),
            self.fetch_properties_by_id(rt.property_id for rt in room_types),
            self.fetch_status_history(booking_ids),
            self.fetch_refund_requests(booking_ids),
        )
        logger.info(
            "Fetched booking relations",
            booking_count=len(bookings),
            guests=len(guests),
            properties=len(properties),
            status_entries=len(history),
            refund_requests=len(refunds),
        )
        return guests, properties, history, refunds

    async def fetch_manual_entries(
        self, owner_id: str, since: date, until: Optional[date] = None
    ) -> list[ManualFinanceEntry]:
        """Owner's ledger lines dated in ``[since, until)``, newest first."""
        query = StoreQuery("manual_finances").eq("user_id", owner_id).gte("date", since.isoformat())
        if until is not None:
            query.lt("date", until.isoformat())
        rows = await self._select(query.order("date"))
        return [ManualFinanceEntry(**row) for row in rows]

    async def fetch_owner_profile(self, owner_id: str) -> Optional[OwnerProfile]:
        row = await self.store_client.select_one(
            StoreQuery("hotel_owners").eq("id", owner_id), self.access_token
        )
        return OwnerProfile(**row) if row else None

    async def fetch_owner_kyc(self, owner_id: str) -> Optional[OwnerKyc]:
        row = await self.store_client.select_one(
            StoreQuery("owner_kyc").eq("user_id", owner_id), self.access_token
        )
        return OwnerKyc(**row) if row else None
