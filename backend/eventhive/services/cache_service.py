"""
Redis caching service for event listings.

CACHING STRATEGY
================

What we cache:
  - Public event listing responses (paginated, JSON-serialized)
  - Cache key pattern: "events:list:{filters}|page={page}&size={size}"

Invalidation:
  - On event creation or publishing: the listing contents change
  - On payment verification: current_attendees changes
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

  All listing keys share the "events:list:" prefix, so invalidation is a
  SCAN over that prefix followed by deletes.

Why NOT cache individual events or tickets:
  - Purchase checks need live inventory; a stale available_quantity would
    only produce confusing Unavailable errors at verification time

Redis is optional. Every operation degrades to a no-op when it is disabled or
unreachable, so a cache outage never fails a request.
"""

import json
from typing import Optional

import redis.asyncio as redis
from eventhive.core.config import get_settings
from eventhive.core.logging import get_logger
from eventhive.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"

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


def make_event_list_key(filter_key: str, page: int, page_size: int) -> str:
    return f"{EVENT_LIST_PREFIX}{filter_key}|page={page}&size={page_size}"


async def get_cached_events(filter_key: str, page: int, page_size: int) -> Optional[dict]:
    """Retrieve cached event list response."""
    client = await get_redis()
    if not client:
        return None

    key = make_event_list_key(filter_key, page, page_size)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_events(filter_key: str, page: int, page_size: int, data: dict) -> None:
    """Cache event list response with TTL."""
    client = await get_redis()
    if not client:
        return

    key = make_event_list_key(filter_key, page, page_size)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """Invalidate all cached event listings."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for the health endpoint."""
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
