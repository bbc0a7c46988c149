"""Owner actions on the guest CRM."""

from typing import Any, Optional

from structlog import get_logger

from src.clients import (
    StoreAuthenticationError,
    StoreClient,
    StoreClientError,
    StoreConflictError,
    StoreQuery,
)
from src.models.statuses import GuestStatus
from src.models.store import Guest
from src.services.actions import (
    SIGN_IN_MESSAGE,
    ActionResult,
    FormValidationError,
    GuestForm,
    validate_form,
)
from src.services.session import OwnerIdentity

logger = get_logger(__name__)

DUPLICATE_EMAIL_MESSAGE = "A guest with this email already exists"


class GuestService:
    """Add, edit, reclassify and delete guests."""

    def __init__(self, store_client: Optional[StoreClient] = None):
        self.store_client = store_client or StoreClient()

    async def add_guest(self, identity: OwnerIdentity, **fields: Any) -> ActionResult:
        """Insert a new guest with status ``new``.

        The email is stored lowercased. A unique-violation on email is
        reported as a duplicate guest.
        """
        try:
            form = validate_form(GuestForm, fields)
        except FormValidationError as e:
            return e.to_result()

        row = {**form.model_dump(), "status": GuestStatus.NEW.value}
        try:
            inserted = await self.store_client.insert("guests", [row], identity.access_token)
        except StoreConflictError:
            logger.info("Duplicate guest email", owner_id=identity.owner_id)
            return ActionResult.failure(DUPLICATE_EMAIL_MESSAGE, field_errors={"email": DUPLICATE_EMAIL_MESSAGE})
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to add guest", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to add guest")

        logger.info("Added guest", owner_id=identity.owner_id)
        return ActionResult.success(
            "Guest added successfully!",
            data=Guest(**inserted[0]) if inserted else None,
        )

    async def update_guest(self, identity: OwnerIdentity, guest_id: str, **fields: Any) -> ActionResult:
        """Replace a guest's editable details."""
        try:
            form = validate_form(GuestForm, fields)
        except FormValidationError as e:
            return e.to_result()

        try:
            updated = await self.store_client.update(
                StoreQuery("guests").eq("id", guest_id), form.model_dump(), identity.access_token
            )
        except StoreConflictError:
            return ActionResult.failure(DUPLICATE_EMAIL_MESSAGE, field_errors={"email": DUPLICATE_EMAIL_MESSAGE})
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to update guest", guest_id=guest_id, error=str(e))
            return ActionResult.failure("Failed to update guest")

        if not updated:
            return ActionResult.failure("Guest not found")
        return ActionResult.success("Guest updated successfully!", data=Guest(**updated[0]))

    async def update_guest_status(
        self, identity: OwnerIdentity, guest_id: str, status: GuestStatus | str
    ) -> ActionResult:
        """Reclassify a guest as new, regular or vip."""
        try:
            status = GuestStatus(status)
        except ValueError:
            return ActionResult.failure(
                "Failed to update status", field_errors={"status": "Select a valid guest status"}
            )

        try:
            await self.store_client.update(
                StoreQuery("guests").eq("id", guest_id),
                {"status": status.value},
                identity.access_token,
            )
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to update guest status", guest_id=guest_id, error=str(e))
            return ActionResult.failure("Failed to update status")

        logger.info("Updated guest status", guest_id=guest_id, status=status.value)
        return ActionResult.success("Guest status updated!")

    async def delete_guest(self, identity: OwnerIdentity, guest_id: str) -> ActionResult:
        """Delete a guest. Immediate and irreversible."""
        try:
            await self.store_client.delete(StoreQuery("guests").eq("id", guest_id), identity.access_token)
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to delete guest", guest_id=guest_id, error=str(e))
            return ActionResult.failure("Failed to delete guest")

        logger.info("Deleted guest", owner_id=identity.owner_id, guest_id=guest_id)
        return ActionResult.success("Guest deleted!")
