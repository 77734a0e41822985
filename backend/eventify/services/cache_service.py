"""
Redis cache for event listings.

WHAT IS CACHED
==============

Only `GET /events/` responses, one entry per (category, search) filter pair:

    events:list:<category or "all">:<sha1 of lower-cased search term>

The search term is hashed so arbitrary user input cannot blow up key length
or smuggle glob characters into the invalidation SCAN pattern.

List entries carry no inventory counts, so checkout never invalidates them.
Event details and ticket types are never cached: the numbers a buyer sees
before checkout must be live.

INVALIDATION
============

Creating or updating an event deletes every `events:list:*` key (SCAN +
UNLINK in batches). The TTL (REDIS_CACHE_TTL) bounds staleness if an
invalidation is ever missed.

FAILURE MODE
============

The cache is advisory. Redis being disabled, down or slow turns every call
into a miss. After a failed connect we wait RECONNECT_INTERVAL seconds before
trying again, so an outage does not add a connect timeout to every request.
"""

import hashlib
import json
import time
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from eventify.core.config import get_settings
from eventify.core.logging import get_logger
from eventify.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"
RECONNECT_INTERVAL = 30.0
_SCAN_BATCH = 200

_redis_client: Optional[redis.Redis] = None
_retry_at = 0.0


async def get_redis() -> Optional[redis.Redis]:
    """Shared client, or None when caching is disabled or Redis is unreachable."""
    global _redis_client, _retry_at

    if not settings.REDIS_ENABLED:
        return None
    if _redis_client is not None:
        return _redis_client
    if time.monotonic() < _retry_at:
        return None

    client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        _retry_at = time.monotonic() + RECONNECT_INTERVAL
        logger.warning("redis_connection_failed", error=str(e), retry_in_s=RECONNECT_INTERVAL)
        await client.aclose()
        return None

    logger.info("redis_connected", url=settings.REDIS_URL)
    _redis_client = client
    return _redis_client


async def close_redis() -> None:
    global _redis_client, _retry_at
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    _retry_at = 0.0


def event_list_key(category_id: Optional[int], search: Optional[str]) -> str:
    digest = hashlib.sha1((search or "").lower().encode("utf-8")).hexdigest()[:16]
    return f"{EVENT_LIST_PREFIX}{category_id or 'all'}:{digest}"


async def get_cached_events(category_id: Optional[int], search: Optional[str]) -> Optional[list]:
    client = await get_redis()
    if client is None:
        return None

    key = event_list_key(category_id, search)
    try:
        data = await client.get(key)
    except RedisError as e:
        logger.warning("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    return json.loads(data) if data is not None else None


async def set_cached_events(category_id: Optional[int], search: Optional[str], data: list) -> None:
    """Store a JSON-ready event list under its filter key with the configured TTL."""
    client = await get_redis()
    if client is None:
        return

    key = event_list_key(category_id, search)
    try:
        await client.set(key, json.dumps(data), ex=settings.REDIS_CACHE_TTL)
    except RedisError as e:
        logger.warning("cache_set_error", key=key, error=str(e))
        return
    record_cache_operation("set", hit=False)


async def invalidate_event_cache() -> None:
    """Drop every cached event list. Called after an event is created or changed."""
    client = await get_redis()
    if client is None:
        return

    deleted = 0
    batch: list[str] = []
    try:
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=_SCAN_BATCH):
            batch.append(key)
            if len(batch) >= _SCAN_BATCH:
                deleted += await client.unlink(*batch)
                batch.clear()
        if batch:
            deleted += await client.unlink(*batch)
    except RedisError as e:
        logger.error("cache_invalidation_error", error=str(e), keys_deleted=deleted)
        return

    logger.info("cache_invalidated", keys_deleted=deleted)


async def get_cache_stats() -> dict:
    """Hit/miss counters from Redis INFO, for /health."""
    client = await get_redis()
    if client is None:
        return {"status": "disabled" if not settings.REDIS_ENABLED else "unavailable"}

    try:
        info = await client.info("stats")
    except RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
