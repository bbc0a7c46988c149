"""Owner actions on bookings."""

from typing import Optional

from structlog import get_logger

from src.clients import StoreAuthenticationError, StoreClient, StoreClientError
from src.models.statuses import BookingStatus
from src.models.store import BookingStatusEntry
from src.services.actions import SIGN_IN_MESSAGE, ActionResult
from src.services.session import OwnerIdentity

logger = get_logger(__name__)


class BookingService:
    """Approve or reject bookings by appending to the status history.

    Booking rows are never updated for status changes; the latest history
    entry becomes the effective status.
    """

    def __init__(self, store_client: Optional[StoreClient] = None):
        self.store_client = store_client or StoreClient()

    async def _append_status(
        self,
        identity: OwnerIdentity,
        booking_id: str,
        status: BookingStatus,
        note: str,
        success_message: str,
        failure_message: str,
    ) -> ActionResult:
        row = {
            "booking_id": booking_id,
            "status": status.value,
            "changed_by": identity.owner_id,
            "notes": note,
        }
        try:
            inserted = await self.store_client.insert(
                "booking_status", [row], identity.access_token
            )
        except StoreAuthenticationError as e:
            logger.warning("Status change rejected", booking_id=booking_id, error=str(e))
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error(
                "Failed to append booking status",
                owner_id=identity.owner_id,
                booking_id=booking_id,
                status=status.value,
                error=str(e),
            )
            return ActionResult.failure(failure_message)

        logger.info(
            "Appended booking status",
            owner_id=identity.owner_id,
            booking_id=booking_id,
            status=status.value,
        )
        entry = BookingStatusEntry(**inserted[0]) if inserted else None
        return ActionResult.success(success_message, data=entry)

    async def approve(self, identity: OwnerIdentity, booking_id: str) -> ActionResult:
        return await self._append_status(
            identity,
            booking_id,
            BookingStatus.CONFIRMED,
            note="Booking approved by owner",
            success_message="Booking approved successfully",
            failure_message="Failed to approve booking",
        )

    async def reject(self, identity: OwnerIdentity, booking_id: str) -> ActionResult:
        return await self._append_status(
            identity,
            booking_id,
            BookingStatus.CANCELLED,
            note="Booking rejected by owner",
            success_message="Booking rejected",
            failure_message="Failed to reject booking",
        )
