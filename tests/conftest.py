from unittest.mock import AsyncMock

import pytest

from src.clients import AuthUser, NotAuthenticatedError
from src.models.store import (
    Booking,
    BookingStatusEntry,
    Guest,
    Property,
    RefundRequest,
    RoomType,
)
from src.services.session import OwnerIdentity
from src.transformers import BookingStitcher
from tests.support import STORE_TABLES, FakeStoreClient, load_store_fixture


@pytest.fixture
def store_tables():
    """Load every store table fixture, fresh per test."""
    return {table: load_store_fixture(table) for table in STORE_TABLES}


@pytest.fixture
def fake_store(store_tables):
    """In-memory store seeded from tests/fixtures/store."""
    return FakeStoreClient(store_tables)


@pytest.fixture
def owner_user():
    return AuthUser(id="owner-1", email="owner@example.com")


@pytest.fixture
def identity():
    return OwnerIdentity(owner_id="owner-1", email="owner@example.com", access_token="token-1")


@pytest.fixture
def mock_auth_client(owner_user):
    """Auth client whose tokens resolve to owner-1; a missing token is rejected."""
    client = AsyncMock()

    async def get_user(access_token):
        if not access_token:
            raise NotAuthenticatedError("User not authenticated")
        return owner_user

    client.get_user.side_effect = get_user
    return client


@pytest.fixture
def stitched_bookings(store_tables):
    """Fixture bookings stitched with every relation."""
    return BookingStitcher.stitch(
        [Booking(**row) for row in store_tables["bookings"]],
        guests=[Guest(**row) for row in store_tables["guests"]],
        room_types=[RoomType(**row) for row in store_tables["room_types"]],
        properties=[Property(**row) for row in store_tables["hotels"]],
        status_history=[BookingStatusEntry(**row) for row in store_tables["booking_status"]],
        refund_requests=[RefundRequest(**row) for row in store_tables["refund_requests"]],
    )
