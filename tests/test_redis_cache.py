"""
Redis Cache Tests - Nexus Intelligence Engine
tests/test_redis_cache.py

Tests for indicator caching: hits, misses, invalidation and graceful
degradation when Redis is disabled or unreachable.
"""
import asyncio
from unittest.mock import MagicMock, patch

import redis

from nexus_engine.models.pipeline import IndicatorObservation
from nexus_engine.routers.health import HEALTH_CACHE_KEY, check_redis
from nexus_engine.services.cache import get_cache, indicator_cache_key, reset_cache
from nexus_engine.services.redis_cache import RedisCache


OBSERVATION = IndicatorObservation(indicator="NY.GDP.MKTP.CD", value=4.04e11, year="2022")


class TestRedisCache:
    """Tests for the RedisCache class."""

    def test_redis_cache_init(self):
        """RedisCache connects through redis.from_url."""
        with patch("nexus_engine.services.redis_cache.redis.from_url") as mock_from_url:
            cache = RedisCache("redis://cache:6379/1")
            mock_from_url.assert_called_once_with(
                "redis://cache:6379/1", decode_responses=True, socket_connect_timeout=5
            )
            assert cache.client is mock_from_url.return_value

    def test_cache_set_and_get(self):
        """Observations round-trip through their JSON form."""
        with patch("nexus_engine.services.redis_cache.redis.from_url") as mock_from_url:
            mock_client = MagicMock()
            mock_from_url.return_value = mock_client

            cache = RedisCache("redis://localhost:6379/0")
            cache.set("indicator:PHL:NY.GDP.MKTP.CD:2018:2023", OBSERVATION, 300)
            mock_client.setex.assert_called_once_with(
                "indicator:PHL:NY.GDP.MKTP.CD:2018:2023",
                300,
                OBSERVATION.model_dump_json(),
            )

            mock_client.get.return_value = OBSERVATION.model_dump_json()
            result = cache.get("indicator:PHL:NY.GDP.MKTP.CD:2018:2023", IndicatorObservation)
            assert result == OBSERVATION

    def test_cache_get_miss(self):
        """A miss returns None."""
        with patch("nexus_engine.services.redis_cache.redis.from_url") as mock_from_url:
            mock_from_url.return_value.get.return_value = None
            cache = RedisCache("redis://localhost:6379/0")
            assert cache.get("indicator:none", IndicatorObservation) is None

    def test_cache_delete(self):
        with patch("nexus_engine.services.redis_cache.redis.from_url") as mock_from_url:
            RedisCache("redis://localhost:6379/0").delete("health:check")
            mock_from_url.return_value.delete.assert_called_once_with("health:check")

    def test_cache_delete_pattern(self):
        """Invalidate every cached indicator for one country."""
        with patch("nexus_engine.services.redis_cache.redis.from_url") as mock_from_url:
            mock_client = MagicMock()
            mock_client.scan_iter.return_value = ["indicator:PHL:a", "indicator:PHL:b"]
            mock_from_url.return_value = mock_client

            RedisCache("redis://localhost:6379/0").delete_pattern("indicator:PHL:*")

            mock_client.scan_iter.assert_called_once_with(match="indicator:PHL:*")
            assert mock_client.delete.call_count == 2


class TestCacheSingleton:
    """Tests for the cache singleton."""

    def teardown_method(self):
        """Reset cache after each test."""
        reset_cache()

    def test_disabled_cache_returns_none(self, settings):
        with patch("nexus_engine.services.cache.get_settings", return_value=settings):
            assert get_cache() is None

    def test_get_cache_returns_instance(self, settings):
        enabled = settings.model_copy(update={"CACHE_ENABLED": True})
        with patch("nexus_engine.services.cache.get_settings", return_value=enabled), \
                patch("nexus_engine.services.cache.RedisCache") as mock_cache_class:
            mock_cache_class.return_value.client.ping.return_value = True
            reset_cache()
            assert get_cache() is mock_cache_class.return_value
            assert get_cache() is mock_cache_class.return_value
            mock_cache_class.assert_called_once_with(enabled.REDIS_URL)

    def test_get_cache_returns_none_when_redis_unavailable(self, settings):
        enabled = settings.model_copy(update={"CACHE_ENABLED": True})
        with patch("nexus_engine.services.cache.get_settings", return_value=enabled), \
                patch("nexus_engine.services.cache.RedisCache") as mock_cache_class:
            mock_cache_class.return_value.client.ping.side_effect = redis.ConnectionError("refused")
            reset_cache()
            assert get_cache() is None

    def test_indicator_cache_key(self):
        assert indicator_cache_key("PHL", "SP.POP.TOTL", "2018:2023") == "indicator:PHL:SP.POP.TOTL:2018:2023"


class TestHealthRoundTrip:
    """Tests for the Redis health check."""

    def test_disabled_cache_is_reported(self, settings):
        with patch("nexus_engine.routers.health.get_settings", return_value=settings):
            assert asyncio.run(check_redis()) == "disabled"

    def test_set_get_delete_round_trip(self, settings):
        enabled = settings.model_copy(update={"CACHE_ENABLED": True})
        stored = {}
        with patch("nexus_engine.routers.health.get_settings", return_value=enabled), \
                patch("nexus_engine.routers.health.RedisCache") as mock_cache_class:
            cache = mock_cache_class.return_value
            cache.set.side_effect = lambda key, value, ttl_seconds: stored.__setitem__(key, value)
            cache.get.side_effect = lambda key, model: stored.get(key)

            assert asyncio.run(check_redis()) == "healthy"
            mock_cache_class.assert_called_once_with(enabled.REDIS_URL)
            cache.delete.assert_called_once_with(HEALTH_CACHE_KEY)

    def test_lost_write_is_unhealthy(self, settings):
        enabled = settings.model_copy(update={"CACHE_ENABLED": True})
        with patch("nexus_engine.routers.health.get_settings", return_value=enabled), \
                patch("nexus_engine.routers.health.RedisCache") as mock_cache_class:
            mock_cache_class.return_value.get.return_value = None
            assert asyncio.run(check_redis()) == "unhealthy: cache round trip mismatch"

    def test_connection_error_is_unhealthy(self, settings):
        enabled = settings.model_copy(update={"CACHE_ENABLED": True})
        with patch("nexus_engine.routers.health.get_settings", return_value=enabled), \
                patch("nexus_engine.routers.health.RedisCache") as mock_cache_class:
            mock_cache_class.return_value.set.side_effect = redis.ConnectionError("refused")
            assert asyncio.run(check_redis()).startswith("unhealthy: refused")
