"""Step to fetch bookings on the owner's room types."""

from datetime import datetime, time

from src.clients import StoreClient
from src.services.entity_fetcher import EntityFetcher
from src.services.pipeline import PipelineContext, PipelineStep


class FetchBookingsStep(PipelineStep):
    """Fetch bookings for the owner's room types, newest first."""

    def __init__(
        self,
        store_client: StoreClient,
        current_year_only: bool = False,
        require_guest: bool = False,
    ):
        """Initialize the step.

        Args:
            store_client: Relational store client
            current_year_only: Bound created_at to the report year
            require_guest: Only bookings linked to a guest row
        """
        super().__init__("FetchBookings")
        self.store_client = store_client
        self.current_year_only = current_year_only
        self.require_guest = require_guest

    async def execute(self, context: PipelineContext) -> bool:
        """Fetch bookings.

        Args:
            context: Pipeline context

        Returns:
            True if successful
        """
        fetcher = EntityFetcher(self.store_client, context.access_token)

        created_since = created_before = None
        if self.current_year_only:
            tz = context.as_of.tzinfo
            created_since = datetime.combine(context.year_start, time.min, tzinfo=tz)
            created_before = datetime.combine(context.year_end, time.min, tzinfo=tz)

        context.bookings = await fetcher.fetch_bookings(
            (rt.id for rt in context.room_types),
            created_since=created_since,
            created_before=created_before,
            require_guest=self.require_guest,
        )

        context.stats["bookings"] = {"fetched": len(context.bookings)}
        self.logger.info(
            "Fetched bookings",
            owner_id=context.owner_id,
            booking_count=len(context.bookings),
            created_since=created_since.isoformat() if created_since else None,
        )
        return True
