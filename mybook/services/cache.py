"""
Redis Cache

JSON values stored in Redis with an expiry. The catalog client uses it
so repeated lookups of the same volume or search do not hit the
external API again.

If Redis cannot be reached, reads are misses and writes are dropped;
callers always have a fresh-fetch path.
"""

import json
import logging
import time
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from mybook.config import get_settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_retry_after: float = 0.0


def get_redis_client() -> Optional[redis.Redis]:
    """
    Shared Redis client, connected on first use.

    Returns None while Redis is unreachable. After a failed ping no new
    connection is attempted for settings.redis_retry_interval seconds.
    """
    global _redis_client, _retry_after

    if _redis_client is not None:
        return _redis_client

    if time.monotonic() < _retry_after:
        return None

    settings = get_settings()
    client = redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        client.ping()
    except RedisError as e:
        logger.warning(
            f"Redis unavailable, catalog caching disabled for "
            f"{settings.redis_retry_interval}s: {e}"
        )
        _retry_after = time.monotonic() + settings.redis_retry_interval
        return None

    logger.info("Connected to Redis")
    _redis_client = client
    return _redis_client


def close_redis_connection() -> None:
    global _redis_client, _retry_after
    _retry_after = 0.0
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
        logger.info("Redis connection closed")


def make_cache_key(prefix: str, *parts, **named) -> str:
    """
    Join a prefix, positional parts and sorted name=value pairs with ':'.

    None values are skipped, and named pairs are sorted so argument
    order never produces two keys for the same lookup.

    Examples:
        make_cache_key("catalog:volume", "zyTCAlFPjgYC") -> "catalog:volume:zyTCAlFPjgYC"
        make_cache_key("catalog:search", q="dune", max=10) -> "catalog:search:max=10:q=dune"
    """
    segments = [prefix]
    segments.extend(str(p) for p in parts if p is not None)
    segments.extend(f"{name}={named[name]}" for name in sorted(named) if named[name] is not None)
    return ":".join(segments)


def cache_get(key: str) -> Optional[Any]:
    """Decoded value stored under key, or None on a miss or any error."""
    client = get_redis_client()
    if client is None:
        return None

    try:
        raw = client.get(key)
    except RedisError as e:
        logger.warning(f"Cache read failed for {key}: {e}")
        return None

    if raw is None:
        logger.debug(f"Cache miss: {key}")
        return None

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Discarding undecodable cache entry {key}")
        return None


def cache_set(key: str, value: Any, ttl: Optional[int] = None) -> bool:
    """
    Store a JSON-serializable value for ttl seconds.

    ttl defaults to settings.cache_ttl. Returns False when nothing was
    stored.
    """
    client = get_redis_client()
    if client is None:
        return False

    expiry = ttl if ttl is not None else get_settings().cache_ttl

    try:
        client.setex(key, expiry, json.dumps(value, default=str))
    except (RedisError, TypeError, ValueError) as e:
        logger.warning(f"Cache write failed for {key}: {e}")
        return False

    logger.debug(f"Cached {key} for {expiry}s")
    return True


def get_cache_stats() -> dict:
    """Connection status and hit/miss counters, reported by /health."""
    client = get_redis_client()
    if client is None:
        return {"status": "disconnected"}

    try:
        stats = client.info("stats")
        catalog_keys = sum(1 for _ in client.scan_iter(match="catalog:*", count=500))
    except RedisError:
        return {"status": "error"}

    return {
        "status": "connected",
        "hits": stats.get("keyspace_hits", 0),
        "misses": stats.get("keyspace_misses", 0),
        "catalog_keys": catalog_keys,
    }
