"""Pipeline context for sharing data between steps."""

from datetime import date, datetime, timezone
from typing import Any, Optional

from src.models.store.fields import to_utc
from src.services.session import OwnerIdentity

# Terminal report states
READY = "ready"
EMPTY = "empty"
UNAUTHENTICATED = "unauthenticated"
ERROR = "error"


class PipelineContext:
    """Context object for passing data between pipeline steps.

    This object is passed to each step and accumulates results
    as the pipeline progresses.
    """

    def __init__(
        self,
        report: str,
        generation: int = 0,
        as_of: Optional[datetime] = None,
        access_token: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        """Initialize pipeline context.

        Args:
            report: Report name (dashboard, bookings, guests, finance, properties)
            generation: Run sequence number for this report
            as_of: Reference instant for "today" and the growth windows
            access_token: Owner session token
            options: Report options (status tab, search, sort, year)
        """
        self.report = report
        self.generation = generation
        self.as_of = to_utc(as_of) if as_of else datetime.now(timezone.utc)
        self.access_token = access_token
        self.options: dict[str, Any] = options or {}
        self.start_time = datetime.now(timezone.utc)

        # Resolved once by ResolveOwnerStep
        self.identity: Optional[OwnerIdentity] = None

        # Raw rows
        self.properties: list = []
        self.room_types: list = []
        self.bookings: list = []
        self.guests: list = []
        self.status_history: list = []
        self.refund_requests: list = []
        self.manual_entries: list = []
        self.owner_profile: Any = None

        # Stitched rows
        self.stitched_bookings: list = []
        self.guest_profiles: list = []

        # Finance aggregates
        self.monthly: list = []

        # Report model produced by the final step
        self.result: Any = None

        # Processing statistics
        self.stats: dict[str, Any] = {}

        # Errors encountered during processing
        self.errors: list[dict[str, str]] = []

        # Set when owner resolution fails
        self.unauthenticated: bool = False

        # Success flag
        self.success: bool = False

    @property
    def owner_id(self) -> Optional[str]:
        return self.identity.owner_id if self.identity else None

    @property
    def year(self) -> int:
        """Report year: the ``year`` option, else the year of ``as_of``."""
        return self.options.get("year") or self.as_of.year

    @property
    def year_start(self) -> date:
        """January 1 of the report year."""
        return date(self.year, 1, 1)

    @property
    def year_end(self) -> date:
        """January 1 of the following year (exclusive bound)."""
        return date(self.year + 1, 1, 1)

    @property
    def state(self) -> str:
        """Terminal state: ready, empty, unauthenticated or error."""
        if self.unauthenticated:
            return UNAUTHENTICATED
        if not self.success:
            return ERROR
        if self.is_empty():
            return EMPTY
        return READY

    def is_empty(self) -> bool:
        """True when the owner has nothing to report on."""
        if self.report == "finance":
            return not self.bookings and not self.manual_entries
        if self.report == "guests":
            return not self.guest_profiles
        if self.report == "properties":
            return not self.properties
        return not self.bookings

    def add_error(self, step_name: str, error_message: str) -> None:
        """Add an error to the context.

        Args:
            step_name: Name of the step where error occurred
            error_message: Error message
        """
        self.errors.append({
            "step": step_name,
            "message": error_message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def has_errors(self) -> bool:
        """Check if any errors were encountered.

        Returns:
            True if errors exist, False otherwise
        """
        return len(self.errors) > 0

    def get_results(self) -> dict[str, Any]:
        """Get final results dictionary.

        Returns:
            Dictionary containing state, report data and statistics
        """
        end_time = datetime.now(timezone.utc)
        duration = (end_time - self.start_time).total_seconds()

        return {
            "report": self.report,
            "generation": self.generation,
            "owner_id": self.owner_id,
            "state": self.state,
            "success": self.success,
            "as_of": self.as_of.isoformat(),
            "duration_seconds": duration,
            "errors": self.errors,
            "stats": self.stats,
        }
