"""Step to fetch the rows related to the fetched bookings."""

from src.clients import StoreClient
from src.services.entity_fetcher import EntityFetcher
from src.services.pipeline import PipelineContext, PipelineStep


class FetchBookingRelationsStep(PipelineStep):
    """Fetch guests, properties, status history and refunds concurrently."""

    def __init__(self, store_client: StoreClient):
        """Initialize the step.

        Args:
            store_client: Relational store client
        """
        super().__init__("FetchBookingRelations")
        self.store_client = store_client

    async def execute(self, context: PipelineContext) -> bool:
        """Fetch booking relations.

        Args:
            context: Pipeline context

        Returns:
            True if successful
        """
        if not context.bookings:
            self.logger.info("No bookings, skipping relations", owner_id=context.owner_id)
            return True

        fetcher = EntityFetcher(self.store_client, context.access_token)
        (
            context.guests,
            related_properties,
            context.status_history,
            context.refund_requests,
        ) = await fetcher.fetch_booking_relations(context.bookings, context.room_types)

        # Keep the owner-scoped properties; add any the scope query did not return
        known = {p.id for p in context.properties}
        context.properties = context.properties + [
            p for p in related_properties if p.id not in known
        ]
        return True
