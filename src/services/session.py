"""Owner identity resolved once per report run or action."""

from typing import Optional

from pydantic import BaseModel
from structlog import get_logger

from src.clients import AuthClient, NotAuthenticatedError

logger = get_logger(__name__)


class OwnerIdentity(BaseModel):
    """The signed-in owner, passed explicitly to every fetch and write."""

    owner_id: str
    email: Optional[str] = None
    access_token: str


async def resolve_owner(auth_client: AuthClient, access_token: Optional[str]) -> OwnerIdentity:
    """Verify the session token and return the owner it belongs to.

    Raises:
        NotAuthenticatedError: If there is no token or the service rejects it
    """
    if not access_token:
        raise NotAuthenticatedError("User not authenticated")

    user = await auth_client.get_user(access_token)
    logger.debug("Resolved owner", owner_id=user.id)
    return OwnerIdentity(owner_id=user.id, email=user.email, access_token=access_token)
