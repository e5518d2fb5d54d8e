import json
import logging
from typing import Optional
from redis.asyncio import Redis
from chauffeur.core.config import settings
from chauffeur.core.metrics import cache_hits, cache_misses

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None

QUOTE_CACHE = "quote"

async def init_redis() -> Redis:
    global redis
    try:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        await redis.ping()
        logger.info(f"Connected to Redis at {settings.REDIS_URL}")
        return redis
    except Exception as e:
        redis = None
        logger.error(f"Failed to connect to Redis: {e}")
        raise

async def close_redis():
    global redis
    if redis:
        await redis.aclose()
        redis = None

def get_redis() -> Optional[Redis]:
    """Shared client, or None when Redis is not connected; callers degrade without it."""
    return redis


async def get_cached(cache: str, key: str) -> Optional[dict]:
    client = get_redis()
    if client is None:
        return None
    try:
        cached = await client.get(key)
    except Exception as e:
        logger.warning(f"Cache retrieval failed for {key}: {e}")
        return None

    if cached is None:
        cache_misses.labels(cache=cache).inc()
        return None
    cache_hits.labels(cache=cache).inc()
    return json.loads(cached)


async def set_cached(key: str, value: dict, ttl: int) -> None:
    client = get_redis()
    if client is None:
        return
    try:
        await client.set(key, json.dumps(value), ex=ttl)
    except Exception as e:
        logger.warning(f"Cache write failed for {key}: {e}")


async def cache_version(cache: str) -> int:
    """Generation counter folded into cache keys; bumping it orphans every older entry."""
    client = get_redis()
    if client is None:
        return 0
    try:
        version = await client.get(f"version:{cache}")
    except Exception as e:
        logger.warning(f"Cache version lookup failed for {cache}: {e}")
        return 0
    return int(version) if version is not None else 0


async def invalidate_cache(cache: str) -> None:
    client = get_redis()
    if client is None:
        return
    try:
        await client.incr(f"version:{cache}")
    except Exception as e:
        logger.error(f"Cache invalidation failed for {cache}: {e}")
