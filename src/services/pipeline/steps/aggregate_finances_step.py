"""Step to bucket bookings and ledger lines by month."""

from src.config import settings
from src.services.pipeline import PipelineContext, PipelineStep
from src.transformers import aggregate_finances


class AggregateFinancesStep(PipelineStep):
    """Aggregate the report year into twelve monthly buckets."""

    def __init__(self):
        super().__init__("AggregateFinances")

    async def execute(self, context: PipelineContext) -> bool:
        context.monthly = aggregate_finances(
            context.stitched_bookings,
            context.manual_entries,
            settings.finance.commission_rate,
            year=context.year,
        )
        context.stats["finance"] = {
            "months": len(context.monthly),
            "bookings": len(context.stitched_bookings),
            "manual_entries": len(context.manual_entries),
        }
        return True
