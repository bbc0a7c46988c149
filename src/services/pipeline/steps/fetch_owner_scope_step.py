"""Step to fetch the owner's properties and room types."""

from src.clients import StoreClient
from src.services.entity_fetcher import EntityFetcher
from src.services.pipeline import PipelineContext, PipelineStep


class FetchOwnerScopeStep(PipelineStep):
    """Fetch properties owned by the owner, then their room types.

    An owner with no properties is not an error: later steps see empty
    id lists and skip their queries.
    """

    def __init__(self, store_client: StoreClient):
        """Initialize the step.

        Args:
            store_client: Relational store client
        """
        super().__init__("FetchOwnerScope")
        self.store_client = store_client

    async def execute(self, context: PipelineContext) -> bool:
        """Fetch properties and room types.

        Args:
            context: Pipeline context

        Returns:
            True if successful
        """
        fetcher = EntityFetcher(self.store_client, context.access_token)

        context.properties = await fetcher.fetch_properties(context.owner_id)
        context.room_types = await fetcher.fetch_room_types(p.id for p in context.properties)

        context.stats["scope"] = {
            "properties": len(context.properties),
            "room_types": len(context.room_types),
        }
        self.logger.info(
            "Fetched owner scope",
            owner_id=context.owner_id,
            properties=len(context.properties),
            room_types=len(context.room_types),
        )
        return True
