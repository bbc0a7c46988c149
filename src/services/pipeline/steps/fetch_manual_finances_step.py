"""Step to fetch the owner's manual ledger for the report year."""

from src.clients import StoreAuthenticationError, StoreClient, StoreClientError
from src.services.entity_fetcher import EntityFetcher
from src.services.pipeline import PipelineContext, PipelineStep


class FetchManualFinancesStep(PipelineStep):
    """Fetch manual finance entries dated in the report year."""

    def __init__(self, store_client: StoreClient):
        """Initialize the step.

        Args:
            store_client: Relational store client
        """
        super().__init__("FetchManualFinances")
        self.store_client = store_client

    async def execute(self, context: PipelineContext) -> bool:
        """Fetch manual finance entries.

        A store failure leaves the ledger empty; the rest of the finance
        report is still produced.

        Args:
            context: Pipeline context

        Returns:
            True if successful, False otherwise
        """
        fetcher = EntityFetcher(self.store_client, context.access_token)
        try:
            context.manual_entries = await fetcher.fetch_manual_entries(
                context.owner_id, context.year_start, context.year_end
            )
        except StoreAuthenticationError:
            raise
        except StoreClientError as e:
            self.logger.warning(
                "Failed to fetch manual finances",
                owner_id=context.owner_id,
                error=str(e),
            )
            context.manual_entries = []
            context.add_error(self.name, f"Failed to fetch manual finances: {str(e)}")
            return False

        self.logger.info(
            "Fetched manual finances",
            owner_id=context.owner_id,
            entry_count=len(context.manual_entries),
        )
        return True

    def is_required(self) -> bool:
        """Manual ledger is optional.

        Returns:
            False
        """
        return False
