import json
import logging
from typing import Any

from redis.asyncio import Redis

from app.core.config import settings

logger = logging.getLogger(__name__)

# Global Redis client instance, set in the application lifespan
redis_client: Redis | None = None


def unread_cache_key(user_id: str) -> str:
    return f"dm:unread:{user_id}"


async def get_cached_unread(user_id: str) -> int | None:
    """Return the cached unread total for a user, or None on miss/failure."""
    if redis_client is None:
        return None
    try:
        cached = await redis_client.get(unread_cache_key(user_id))
    except Exception:
        logger.warning("Redis cache read failed for unread count")
        return None
    return int(cached) if cached is not None else None


async def set_cached_unread(user_id: str, count: int) -> None:
    if redis_client is None:
        return
    try:
        await redis_client.setex(
            unread_cache_key(user_id), settings.UNREAD_CACHE_TTL_SECONDS, str(count)
        )
    except Exception:
        logger.warning("Redis cache write failed for unread count")


async def invalidate_unread(user_id: str) -> None:
    if redis_client is None:
        return
    try:
        await redis_client.delete(unread_cache_key(user_id))
    except Exception:
        logger.warning("Failed to invalidate unread cache for user %s", user_id)


async def publish(channel: str, payload: dict[str, Any]) -> int:
    """
    Publish a JSON payload on a pub/sub channel.

    Returns:
        Number of subscribers that received the message (0 without Redis).
    """
    if redis_client is None:
        return 0
    receivers: int = await redis_client.publish(channel, json.dumps(payload, default=str))
    return receivers
