"""Owner actions on the manual finance ledger."""

from typing import Any, Optional

from structlog import get_logger

from src.clients import StoreAuthenticationError, StoreClient, StoreClientError, StoreQuery
from src.models.store import ManualFinanceEntry
from src.services.actions import (
    SIGN_IN_MESSAGE,
    ActionResult,
    FinanceEntryForm,
    FormValidationError,
    validate_form,
)
from src.services.session import OwnerIdentity

logger = get_logger(__name__)


class FinanceService:
    """Create, edit and delete manual ledger entries."""

    def __init__(self, store_client: Optional[StoreClient] = None):
        self.store_client = store_client or StoreClient()

    async def save_entry(
        self,
        identity: OwnerIdentity,
        entry_id: Optional[str] = None,
        **fields: Any,
    ) -> ActionResult:
        """Insert a new entry, or update ``entry_id`` when given.

        New entries are owned by the signed-in owner (``user_id``).
        """
        try:
            form = validate_form(FinanceEntryForm, fields)
        except FormValidationError as e:
            return e.to_result()

        row = {
            "title": form.title,
            "description": form.description,
            "amount": str(form.amount),
            "type": form.type.value,
            "category": form.category,
            "date": form.entry_date.isoformat(),
        }

        try:
            if entry_id:
                saved = await self.store_client.update(
                    StoreQuery("manual_finances").eq("id", entry_id), row, identity.access_token
                )
            else:
                saved = await self.store_client.insert(
                    "manual_finances", [{**row, "user_id": identity.owner_id}], identity.access_token
                )
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error(
                "Failed to save finance entry",
                owner_id=identity.owner_id,
                entry_id=entry_id,
                error=str(e),
            )
            return ActionResult.failure("Failed to save entry")

        logger.info(
            "Saved finance entry",
            owner_id=identity.owner_id,
            entry_id=entry_id,
            type=form.type.value,
        )
        return ActionResult.success(
            "Entry updated!" if entry_id else "Entry added!",
            data=ManualFinanceEntry(**saved[0]) if saved else None,
        )

    async def delete_entry(self, identity: OwnerIdentity, entry_id: str) -> ActionResult:
        """Delete an entry. Immediate and irreversible."""
        try:
            await self.store_client.delete(
                StoreQuery("manual_finances").eq("id", entry_id), identity.access_token
            )
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to delete finance entry", entry_id=entry_id, error=str(e))
            return ActionResult.failure("Failed to delete entry")

        logger.info("Deleted finance entry", owner_id=identity.owner_id, entry_id=entry_id)
        return ActionResult.success("Entry deleted!")
