"""Step to derive guest profiles from stitched bookings."""

from src.services.pipeline import PipelineContext, PipelineStep
from src.transformers import GuestStitcher


class StitchGuestsStep(PipelineStep):
    """Build GuestProfile records for every guest with a booking."""

    def __init__(self):
        super().__init__("StitchGuests")

    async def execute(self, context: PipelineContext) -> bool:
        context.guest_profiles = GuestStitcher.stitch(context.guests, context.stitched_bookings)
        context.stats["guests"] = {"profiles": len(context.guest_profiles)}
        return True
