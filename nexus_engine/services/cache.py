"""
Cache Service Singleton - Nexus Intelligence Engine
nexus_engine/services/cache.py

Provides the shared indicator cache when CACHE_ENABLED is set.
Returns None when caching is off or Redis is unreachable, so callers
fall through to the live data source.
"""

import logging
from typing import Optional

import redis

from nexus_engine.config import get_settings
from nexus_engine.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

# Singleton instance
_cache: Optional[RedisCache] = None


def indicator_cache_key(country_code: str, indicator: str, date_range: str) -> str:
    return f"indicator:{country_code}:{indicator}:{date_range}"


def get_cache() -> Optional[RedisCache]:
    """
    Get or create the Redis cache instance.

    Returns:
        RedisCache if caching is enabled and Redis answers a ping, None otherwise.
    """
    global _cache
    settings = get_settings()
    if not settings.CACHE_ENABLED:
        return None
    if _cache is None:
        try:
            _cache = RedisCache(settings.REDIS_URL)
            _cache.client.ping()
        except (redis.RedisError, ConnectionError) as exc:
            logger.warning("Redis unavailable, indicator cache disabled", extra={"error": str(exc)})
            _cache = None
    return _cache


def reset_cache() -> None:
    """Reset the cache singleton (tests, reconnects)."""
    global _cache
    _cache = None
