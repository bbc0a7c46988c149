"""Business services package."""

from src.services.account_service import AccountService
from src.services.actions import ActionResult, FormValidationError
from src.services.booking_service import BookingService
from src.services.entity_fetcher import EntityFetcher
from src.services.finance_service import FinanceService
from src.services.guest_service import GuestService
from src.services.report_orchestrator import REPORTS, ReportOrchestrator
from src.services.session import OwnerIdentity, resolve_owner

__all__ = [
    "AccountService",
    "ActionResult",
    "BookingService",
    "EntityFetcher",
    "FinanceService",
    "FormValidationError",
    "GuestService",
    "OwnerIdentity",
    "REPORTS",
    "ReportOrchestrator",
    "resolve_owner",
]
