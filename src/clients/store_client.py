"""REST client for the hosted relational store (PostgREST dialect)."""

import asyncio
from typing import Any, Iterable, Optional

import httpx
from structlog import get_logger

from src.config import settings

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"


class StoreClientError(Exception):
    """Base exception for store client errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class StoreAuthenticationError(StoreClientError):
    """Raised when the store rejects the session token."""

    pass


class StoreNotFoundError(StoreClientError):
    """Raised when a table or row is not found."""

    pass


class StoreConflictError(StoreClientError):
    """Raised on unique / constraint violations."""

    pass


class StoreServerError(StoreClientError):
    """Raised when the store returns a server error."""

    pass


class StoreQuery:
    """Filter builder for a single table.

    Produces PostgREST query parameters, e.g.
    ``StoreQuery("bookings").in_("room_type_id", ids).order("created_at")``
    becomes ``?select=*&room_type_id=in.("a","b")&order=created_at.desc``.
    """

    def __init__(self, table: str, select: str = "*"):
        self.table = table
        self.params: list[tuple[str, str]] = [("select", select)]

    def eq(self, column: str, value: Any) -> "StoreQuery":
        self.params.append((column, f"eq.{value}"))
        return self

    def gte(self, column: str, value: Any) -> "StoreQuery":
        self.params.append((column, f"gte.{value}"))
        return self

    def lt(self, column: str, value: Any) -> "StoreQuery":
        self.params.append((column, f"lt.{value}"))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "StoreQuery":
        quoted = ",".join(f'"{value}"' for value in values)
        self.params.append((column, f"in.({quoted})"))
        return self

    def not_null(self, column: str) -> "StoreQuery":
        self.params.append((column, "not.is.null"))
        return self

    def order(self, column: str, ascending: bool = False) -> "StoreQuery":
        direction = "asc" if ascending else "desc"
        self.params.append(("order", f"{column}.{direction}"))
        return self

    def limit(self, count: int) -> "StoreQuery":
        self.params.append(("limit", str(count)))
        return self

    def filters(self) -> list[tuple[str, str]]:
        """Return the row filters only (no select/order/limit)."""
        return [p for p in self.params if p[0] not in ("select", "order", "limit")]


class StoreClient:
    """Client for the store's table endpoints."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the store client with settings.

        Args:
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = settings.supabase.rest_url
        self.api_key = settings.supabase.anon_key
        self.timeout = settings.supabase.request_timeout
        self.max_attempts = max(1, settings.supabase.max_attempts)
        self.retry_backoff_base = settings.supabase.retry_backoff_base
        self.transport = transport

    def _get_headers(
        self,
        access_token: Optional[str],
        prefer: Optional[str] = None,
    ) -> dict[str, str]:
        """Build request headers. The access token scopes row-level security."""
        headers = {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "User-Agent": "HotelOwnerBackOffice/1.0",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple[Optional[str], str]:
        """Extract (code, message) from a PostgREST error body."""
        try:
            body = response.json()
        except ValueError:
            return None, response.text[:200]
        if isinstance(body, dict):
            return body.get("code"), body.get("message") or response.text[:200]
        return None, response.text[:200]

    async def _make_request(
        self,
        method: str,
        table: str,
        access_token: Optional[str],
        params: Optional[list[tuple[str, str]]] = None,
        data: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        """Make an HTTP request to the store with optional retry.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            table: Table name (endpoint path)
            access_token: Owner session token, None for anonymous access
            params: Query parameters (filters, select, order, ...)
            data: JSON body for writes
            prefer: PostgREST ``Prefer`` header value

        Returns:
            The successful response

        Raises:
            StoreAuthenticationError: If the session token is rejected
            StoreNotFoundError: If the resource is not found
            StoreConflictError: On constraint violations
            StoreServerError: If a server error persists
            StoreClientError: For other errors
        """
        url = f"{self.base_url}/{table}"
        headers = self._get_headers(access_token, prefer)

        for attempt in range(self.max_attempts):
            retries_left = attempt < self.max_attempts - 1
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self.transport
                ) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        params=params,
                        json=data,
                    )

                if response.status_code in (401, 403):
                    code, message = self._error_details(response)
                    logger.error(
                        "Store rejected session",
                        table=table,
                        status_code=response.status_code,
                        code=code,
                    )
                    raise StoreAuthenticationError(
                        f"Not authorized for {table}: {message}", code=code
                    )

                if response.status_code == 404:
                    code, message = self._error_details(response)
                    logger.warning("Store resource not found", table=table, code=code)
                    raise StoreNotFoundError(f"Resource not found: {table}", code=code)

                if response.status_code >= 500:
                    if retries_left:
                        wait_time = self.retry_backoff_base ** attempt
                        logger.warning(
                            "Store server error, retrying",
                            table=table,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            max_attempts=self.max_attempts,
                            wait_seconds=wait_time,
                        )
                        await asyncio.sleep(wait_time)
                        continue
                    logger.error(
                        "Store server error",
                        table=table,
                        status_code=response.status_code,
                    )
                    raise StoreServerError(
                        f"Server error at {table}: {response.text[:200]}"
                    )

                if 400 <= response.status_code < 500:
                    code, message = self._error_details(response)
                    if response.status_code == 409 or code == UNIQUE_VIOLATION:
                        logger.warning(
                            "Store constraint violation",
                            table=table,
                            code=code,
                            message=message,
                        )
                        raise StoreConflictError(message, code=code)
                    logger.error(
                        "Store client error",
                        table=table,
                        status_code=response.status_code,
                        code=code,
                        message=message,
                    )
                    raise StoreClientError(
                        f"Client error at {table}: {message}", code=code
                    )

                logger.debug(
                    "Store request successful",
                    table=table,
                    method=method,
                    status_code=response.status_code,
                )
                return response

            except httpx.TimeoutException as e:
                if retries_left:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Store request timeout, retrying",
                        table=table,
                        attempt=attempt + 1,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error("Store request timeout", table=table)
                raise StoreClientError(f"Request timeout for {table}") from e

            except httpx.RequestError as e:
                if retries_left:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Store request error, retrying",
                        table=table,
                        error=str(e),
                        attempt=attempt + 1,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error("Store request error", table=table, error=str(e))
                raise StoreClientError(f"Request failed for {table}: {str(e)}") from e

        raise StoreClientError(f"Failed to complete request to {table}")

    @staticmethod
    def _rows(response: httpx.Response) -> list[dict[str, Any]]:
        if not response.text:
            return []
        body = response.json()
        if isinstance(body, list):
            return body
        return [body]

    async def select(
        self, query: StoreQuery, access_token: Optional[str]
    ) -> list[dict[str, Any]]:
        """Fetch the rows matching a query."""
        response = await self._make_request(
            "GET", query.table, access_token, params=query.params
        )
        rows = self._rows(response)
        logger.debug("Fetched rows", table=query.table, row_count=len(rows))
        return rows

    async def select_one(
        self, query: StoreQuery, access_token: Optional[str]
    ) -> Optional[dict[str, Any]]:
        """Fetch the first matching row, or None."""
        rows = await self.select(query.limit(1), access_token)
        return rows[0] if rows else None

    async def insert(
        self,
        table: str,
        rows: list[dict[str, Any]],
        access_token: Optional[str],
        on_conflict: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Insert rows; with ``on_conflict`` the insert becomes an upsert."""
        params = None
        prefer = "return=representation"
        if on_conflict:
            params = [("on_conflict", on_conflict)]
            prefer = "return=representation,resolution=merge-duplicates"
        response = await self._make_request(
            "POST", table, access_token, params=params, data=rows, prefer=prefer
        )
        logger.info("Inserted rows", table=table, row_count=len(rows), upsert=bool(on_conflict))
        return self._rows(response)

    async def update(
        self,
        query: StoreQuery,
        values: dict[str, Any],
        access_token: Optional[str],
    ) -> list[dict[str, Any]]:
        """Update the rows matching the query filters."""
        filters = query.filters()
        if not filters:
            raise StoreClientError(f"Refusing unfiltered update on {query.table}")
        response = await self._make_request(
            "PATCH",
            query.table,
            access_token,
            params=filters,
            data=values,
            prefer="return=representation",
        )
        rows = self._rows(response)
        logger.info("Updated rows", table=query.table, row_count=len(rows))
        return rows

    async def delete(
        self, query: StoreQuery, access_token: Optional[str]
    ) -> list[dict[str, Any]]:
        """Delete the rows matching the query filters."""
        filters = query.filters()
        if not filters:
            raise StoreClientError(f"Refusing unfiltered delete on {query.table}")
        response = await self._make_request(
            "DELETE",
            query.table,
            access_token,
            params=filters,
            prefer="return=representation",
        )
        rows = self._rows(response)
        logger.info("Deleted rows", table=query.table, row_count=len(rows))
        return rows
