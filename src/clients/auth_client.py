"""Client for the hosted authentication service (GoTrue dialect)."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from pydantic import BaseModel
from structlog import get_logger

from src.config import settings

logger = get_logger(__name__)


class AuthClientError(Exception):
    """Base exception for auth client errors."""

    pass


class NotAuthenticatedError(AuthClientError):
    """Raised when there is no valid session. Distinct from "no data"."""

    pass


class InvalidCredentialsError(AuthClientError):
    """Raised when a password sign-in is refused."""

    pass


class AuthUser(BaseModel):
    """Authenticated user as returned by the auth service."""

    id: str
    email: Optional[str] = None


class OwnerSession(BaseModel):
    """Signed-in owner session."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: datetime
    user: AuthUser

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at


class AuthClient:
    """Client for password sign-in, user lookup and password updates."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the auth client with settings.

        Args:
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = settings.supabase.auth_url
        self.api_key = settings.supabase.anon_key
        self.timeout = settings.supabase.request_timeout
        self.transport = transport

    def _get_headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "User-Agent": "HotelOwnerBackOffice/1.0",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the human readable message out of an auth error body.

        The service has used ``error_description``, ``msg`` and ``message``
        across versions.
        """
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if not isinstance(body, dict):
            return response.text[:200]
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or response.text[:200]
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        access_token: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{endpoint}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                return await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(access_token),
                    json=data,
                    params=params,
                )
        except httpx.TimeoutException as e:
            logger.error("Auth request timeout", endpoint=endpoint)
            raise AuthClientError(f"Request timeout for {endpoint}") from e
        except httpx.RequestError as e:
            logger.error("Auth request error", endpoint=endpoint, error=str(e))
            raise AuthClientError(f"Request failed for {endpoint}: {str(e)}") from e

    async def sign_in_with_password(self, email: str, password: str) -> OwnerSession:
        """Exchange email and password for a session.

        Raises:
            InvalidCredentialsError: If the service refuses the credentials
            AuthClientError: For other failures
        """
        response = await self._request(
            "POST",
            "/token",
            data={"email": email, "password": password},
            params={"grant_type": "password"},
        )

        if response.status_code in (400, 401, 422, 429):
            message = self._error_message(response)
            logger.warning(
                "Password sign-in refused",
                status_code=response.status_code,
                message=message,
            )
            raise InvalidCredentialsError(message)

        if response.status_code != 200:
            logger.error("Password sign-in failed", status_code=response.status_code)
            raise AuthClientError(f"Sign-in failed: {self._error_message(response)}")

        body = response.json()
        expires_in = int(body.get("expires_in") or 3600)
        session = OwnerSession(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            user=AuthUser(**body["user"]),
        )
        logger.info("Owner signed in", owner_id=session.user.id)
        return session

    async def get_user(self, access_token: Optional[str]) -> AuthUser:
        """Resolve the user behind an access token.

        Raises:
            NotAuthenticatedError: If there is no token or it is rejected
            AuthClientError: For other failures
        """
        if not access_token:
            raise NotAuthenticatedError("User not authenticated")

        response = await self._request("GET", "/user", access_token=access_token)

        if response.status_code in (401, 403):
            logger.warning("Session token rejected", status_code=response.status_code)
            raise NotAuthenticatedError("User not authenticated")

        if response.status_code != 200:
            raise AuthClientError(f"User lookup failed: {self._error_message(response)}")

        return AuthUser(**response.json())

    async def update_password(self, access_token: str, new_password: str) -> None:
        """Set a new password for the signed-in user."""
        response = await self._request(
            "PUT", "/user", access_token=access_token, data={"password": new_password}
        )
        if response.status_code in (401, 403):
            raise NotAuthenticatedError("User not authenticated")
        if response.status_code != 200:
            raise AuthClientError(
                f"Password update failed: {self._error_message(response)}"
            )
        logger.info("Password updated")

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session server side."""
        response = await self._request("POST", "/logout", access_token=access_token)
        if response.status_code not in (200, 204, 401):
            raise AuthClientError(f"Sign-out failed: {self._error_message(response)}")
        logger.info("Owner signed out")
