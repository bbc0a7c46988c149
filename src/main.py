"""Main entry point for the hotel owner back-office reports."""

import asyncio
import json
import sys
from typing import Optional

from src.clients import AuthClient, RedisSessionStore, StoreClient
from src.config import configure_logging, get_logger, settings
from src.services import REPORTS, AccountService, ReportOrchestrator

logger = get_logger(__name__)


async def _ensure_session(
    auth_client: AuthClient,
    store_client: StoreClient,
    session_store: RedisSessionStore,
) -> Optional[str]:
    """Return a usable access token, signing in with configured credentials if needed."""
    session = await session_store.load()
    if session is not None:
        return session.access_token

    if not settings.owner_email or not settings.owner_password:
        logger.warning("No cached session and no owner credentials configured")
        return None

    account = AccountService(auth_client, store_client, session_store)
    result = await account.sign_in(settings.owner_email, settings.owner_password)
    if not result.ok:
        logger.error("Owner sign-in failed", message=result.message)
        return None
    return result.data["session"].access_token


async def main(report: str = "dashboard") -> int:
    """Run one report for the configured owner and print it as JSON.

    Args:
        report: Report name, one of REPORTS

    Returns:
        Process exit code
    """
    if report not in REPORTS:
        logger.error("Unknown report", report=report, available=list(REPORTS))
        return 1

    logger.info("Starting report run", report=report, environment=settings.environment)

    auth_client = AuthClient()
    store_client = StoreClient()
    session_store = RedisSessionStore()

    try:
        access_token = await _ensure_session(auth_client, store_client, session_store)
        orchestrator = ReportOrchestrator(auth_client, store_client, session_store)
        results = await orchestrator.run_report(report, access_token=access_token)
        print(json.dumps(results, indent=2, default=str))
        return 0 if results["success"] else 1
    except Exception as e:
        logger.error("Fatal error in main application", error=str(e), exc_info=True)
        return 1
    finally:
        await session_store.close()


def run_sync(report: str = "dashboard") -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    return asyncio.run(main(report))


def run() -> None:
    """Console entry point: ``hotel-owner-backoffice [report]``."""
    configure_logging()
    sys.exit(run_sync(sys.argv[1] if len(sys.argv) > 1 else "dashboard"))


if __name__ == "__main__":
    run()
