"""
Redis caching service for room inventory listings.

CACHING STRATEGY
================

What we cache:
  - Room listing responses (filtered by category/status, JSON-serialized)
  - Cache key pattern: "rooms:list:category={category}&status={status}"

Why:
  - Front desk screens poll the room board constantly
  - Room state only changes on bookings, releases and staff status updates

Invalidation strategy:
  - Any booking create/delete, room create, status change or release deletes
    every "rooms:list:*" key (SCAN + DELETE)
  - TTL-based expiry as safety net (5 minutes)

What we never cache:
  - Single room reads and anything the allocator reads. Allocation always
    goes to the database under row locks; a stale cache there would mean
    double booking.

Redis is optional: if it is disabled or unreachable every call degrades to a
cache miss / no-op.
"""

import json
from typing import Optional

import redis.asyncio as redis
from hotel_booking.core.config import get_settings
from hotel_booking.core.metrics import record_cache_operation
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

ROOM_LIST_PREFIX = "rooms:list:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_room_list_key(category: Optional[str], room_status: Optional[str]) -> str:
    return f"{ROOM_LIST_PREFIX}category={category or '*'}&status={room_status or '*'}"


async def get_cached_rooms(category: Optional[str], room_status: Optional[str]) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_room_list_key(category, room_status)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=bool(data))
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_rooms(category: Optional[str], room_status: Optional[str], data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_room_list_key(category, room_status)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", hit=True)
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_room_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{ROOM_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
