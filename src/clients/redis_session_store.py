"""Redis-backed cache for the signed-in owner session."""

from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as redis
from structlog import get_logger

from src.clients.auth_client import OwnerSession
from src.config import settings

logger = get_logger(__name__)


class RedisSessionStore:
    """Keeps the owner session so report runs do not need to sign in again.

    Cache failures are logged and tolerated: a missing session simply means
    the owner has to sign in.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        """Initialize Redis client for session caching."""
        self.redis_client = redis_client or redis.Redis(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            password=settings.redis.password,
            ssl=settings.redis.ssl,
            decode_responses=True,
            socket_timeout=settings.redis.socket_timeout,
            socket_connect_timeout=settings.redis.socket_connect_timeout,
        )
        self.key = settings.redis.session_key
        self.expiry_buffer = settings.redis.session_expiry_buffer

    async def load(self) -> Optional[OwnerSession]:
        """Return the cached session, or None if absent, expired or unreadable."""
        try:
            raw = await self.redis_client.get(self.key)
        except Exception as e:
            logger.warning("Redis get operation failed", error=str(e))
            return None

        if not raw:
            return None

        try:
            session = OwnerSession.model_validate_json(raw)
        except ValueError as e:
            logger.warning("Discarding unreadable cached session", error=str(e))
            return None

        if session.is_expired:
            logger.debug("Cached session expired", owner_id=session.user.id)
            return None
        return session

    async def save(self, session: OwnerSession) -> None:
        """Store the session with a TTL just short of the token lifetime."""
        remaining = (session.expires_at - datetime.now(timezone.utc)).total_seconds()
        # Clamp to at least 1 second so short-lived tokens never produce a non-positive TTL
        ttl = max(1, int(remaining) - self.expiry_buffer)
        try:
            await self.redis_client.setex(self.key, ttl, session.model_dump_json())
            logger.info("Stored owner session in Redis", owner_id=session.user.id, ttl_seconds=ttl)
        except Exception as e:
            logger.warning(
                "Failed to store session in Redis (session still usable)",
                error=str(e),
            )

    async def clear(self) -> None:
        """Forget the cached session."""
        try:
            await self.redis_client.delete(self.key)
        except Exception as e:
            logger.warning("Failed to clear session in Redis", error=str(e))

    async def close(self) -> None:
        """Close Redis connection."""
        try:
            await self.redis_client.close()
            logger.debug("Closed Redis connection")
        except Exception as e:
            logger.warning("Error closing Redis connection", error=str(e))
