"""Step to stitch relations onto bookings."""

from src.services.pipeline import PipelineContext, PipelineStep
from src.transformers import BookingStitcher


class StitchBookingsStep(PipelineStep):
    """Attach guest, room type, property, effective status and refund."""

    def __init__(self):
        super().__init__("StitchBookings")

    async def execute(self, context: PipelineContext) -> bool:
        context.stitched_bookings = BookingStitcher.stitch(
            context.bookings,
            guests=context.guests,
            room_types=context.room_types,
            properties=context.properties,
            status_history=context.status_history,
            refund_requests=context.refund_requests,
        )
        context.stats["bookings"] = {
            **context.stats.get("bookings", {}),
            "stitched": len(context.stitched_bookings),
        }
        return True
