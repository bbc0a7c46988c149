"""Shared test helpers: fixture loading and an in-memory store."""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from src.clients import StoreQuery, StoreServerError

FIXTURES_DIR = Path(__file__).parent / "fixtures"

STORE_TABLES = (
    "hotels",
    "room_types",
    "bookings",
    "guests",
    "booking_status",
    "refund_requests",
    "manual_finances",
    "hotel_owners",
    "owner_kyc",
)

# Reference instant used by the report tests: Sunday 15 June 2025, noon UTC
AS_OF = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def load_store_fixture(table: str) -> list[dict[str, Any]]:
    with open(FIXTURES_DIR / "store" / f"{table}.json") as f:
        return json.load(f)


def _matches(row: dict[str, Any], column: str, expression: str) -> bool:
    value = row.get(column)
    if expression == "not.is.null":
        return value is not None
    operator, _, operand = expression.partition(".")
    if operator == "eq":
        return value is not None and str(value) == operand
    if operator == "gte":
        return value is not None and str(value) >= operand
    if operator == "lt":
        return value is not None and str(value) < operand
    if operator == "in":
        wanted = {item.strip('"') for item in operand.strip("()").split(",")}
        return value is not None and str(value) in wanted
    raise AssertionError(f"Unsupported filter {column}={expression}")


class FakeStoreClient:
    """In-memory stand-in for StoreClient that evaluates StoreQuery params."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]]):
        self.tables = tables
        self.queries: list[StoreQuery] = []
        self.fail_tables: set[str] = set()
        self.fail_with: type[Exception] = StoreServerError
        self.paused = asyncio.Event()
        self._gate: Optional[tuple[str, asyncio.Event]] = None

    def pause_next(self, table: str) -> asyncio.Event:
        """Block the next select on ``table`` until the returned event is set."""
        release = asyncio.Event()
        self._gate = (table, release)
        return release

    async def select(self, query: StoreQuery, access_token: Optional[str]) -> list[dict[str, Any]]:
        self.queries.append(query)

        if self._gate and self._gate[0] == query.table:
            _, release = self._gate
            self._gate = None
            self.paused.set()
            await release.wait()

        if query.table in self.fail_tables:
            raise self.fail_with(f"Server error at {query.table}")

        rows = list(self.tables.get(query.table, []))
        limit = None
        for column, expression in query.params:
            if column == "select":
                continue
            if column == "limit":
                limit = int(expression)
            elif column == "order":
                field, _, direction = expression.partition(".")
                rows.sort(key=lambda r: str(r.get(field) or ""), reverse=direction == "desc")
            else:
                rows = [r for r in rows if _matches(r, column, expression)]
        return rows[:limit] if limit is not None else rows

    async def select_one(self, query: StoreQuery, access_token: Optional[str]) -> Optional[dict[str, Any]]:
        rows = await self.select(query.limit(1), access_token)
        return rows[0] if rows else None

    def tables_queried(self) -> list[str]:
        return [q.table for q in self.queries]
