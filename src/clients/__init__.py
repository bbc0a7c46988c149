"""API clients package."""

from src.clients.auth_client import (
    AuthClient,
    AuthClientError,
    AuthUser,
    InvalidCredentialsError,
    NotAuthenticatedError,
    OwnerSession,
)
from src.clients.redis_session_store import RedisSessionStore
from src.clients.store_client import (
    StoreAuthenticationError,
    StoreClient,
    StoreClientError,
    StoreConflictError,
    StoreNotFoundError,
    StoreQuery,
    StoreServerError,
)

__all__ = [
    "AuthClient",
    "AuthClientError",
    "AuthUser",
    "InvalidCredentialsError",
    "NotAuthenticatedError",
    "OwnerSession",
    "RedisSessionStore",
    "StoreClient",
    "StoreClientError",
    "StoreAuthenticationError",
    "StoreConflictError",
    "StoreNotFoundError",
    "StoreServerError",
    "StoreQuery",
]
