"""Step to fetch the owner's profile and branding."""

from src.clients import StoreAuthenticationError, StoreClient, StoreClientError
from src.services.entity_fetcher import EntityFetcher
from src.services.pipeline import PipelineContext, PipelineStep


class FetchOwnerProfileStep(PipelineStep):
    """Fetch business name and logo for the dashboard header."""

    def __init__(self, store_client: StoreClient):
        """Initialize the step.

        Args:
            store_client: Relational store client
        """
        super().__init__("FetchOwnerProfile")
        self.store_client = store_client

    async def execute(self, context: PipelineContext) -> bool:
        """Fetch the owner profile.

        Args:
            context: Pipeline context

        Returns:
            True if successful, False otherwise
        """
        fetcher = EntityFetcher(self.store_client, context.access_token)
        try:
            context.owner_profile = await fetcher.fetch_owner_profile(context.owner_id)
            return True
        except StoreAuthenticationError:
            raise
        except StoreClientError as e:
            self.logger.warning(
                "Failed to fetch owner profile",
                owner_id=context.owner_id,
                error=str(e),
            )
            context.add_error(self.name, f"Failed to fetch owner profile: {str(e)}")
            return False

    def is_required(self) -> bool:
        """Branding is optional; the dashboard falls back to defaults.

        Returns:
            False
        """
        return False
