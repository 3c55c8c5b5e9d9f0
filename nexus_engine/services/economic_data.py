"""
Economic Data Service - Nexus Intelligence Engine
nexus_engine/services/economic_data.py

World Bank indicator client.

Endpoint:
    {WORLD_BANK_API_URL}/country/{ISO3}/indicator/{code}
        ?date=2018:2023&format=json&per_page=10

Payload is [metadata, observations]. Observations with a null value are
discarded and the most recent by year is kept.

A single failed indicator raises DataSourceException from
fetch_observation(); fetch_indicators() fans out concurrently and turns
individual failures into None so one bad series never sinks the batch.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

import httpx
import redis

from nexus_engine.config import Settings, get_settings
from nexus_engine.core.exceptions import DataSourceException
from nexus_engine.models.pipeline import IndicatorObservation
from nexus_engine.services.cache import get_cache, indicator_cache_key
from nexus_engine.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)


class EconomicDataSource(Protocol):
    async def fetch_indicators(
        self, country_code: str, indicators: Iterable[str]
    ) -> Dict[str, Optional[IndicatorObservation]]:
        ...

    def invalidate(self, country_code: str) -> None:
        ...


def latest_observation(indicator: str, payload: Any) -> Optional[IndicatorObservation]:
    """
    Pick the most recent non-null observation from a World Bank payload.

    Raises:
        DataSourceException: if the payload is not the documented shape
    """
    if isinstance(payload, list) and payload and isinstance(payload[0], dict) and "message" in payload[0]:
        raise DataSourceException(f"World Bank error for {indicator}: {payload[0]['message']}")
    if not isinstance(payload, list) or len(payload) < 2:
        raise DataSourceException(f"Unexpected World Bank payload for {indicator}")

    rows = payload[1]
    if rows is None:
        return None
    if not isinstance(rows, list):
        raise DataSourceException(f"Unexpected World Bank observations for {indicator}")

    candidates: List[IndicatorObservation] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        value = row.get("value")
        year = str(row.get("date", ""))
        if value is None or not year.isdigit():
            continue
        try:
            candidates.append(IndicatorObservation(indicator=indicator, value=float(value), year=year))
        except (TypeError, ValueError):
            logger.debug(f"Skipping malformed observation for {indicator}: {row}")

    if not candidates:
        return None
    return max(candidates, key=lambda obs: int(obs.year))


class WorldBankClient:
    """Async World Bank API client with optional Redis observation cache."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[RedisCache] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.cache = cache if cache is not None else get_cache()
        self.headers = {"User-Agent": self.settings.DATA_USER_AGENT}

    def _url(self, country_code: str, indicator: str) -> str:
        base = self.settings.WORLD_BANK_API_URL.rstrip("/")
        return f"{base}/country/{country_code}/indicator/{indicator}"

    def _params(self) -> Dict[str, Any]:
        return {"date": self.settings.WORLD_BANK_DATE_RANGE, "format": "json", "per_page": 10}

    def _cached(self, key: str) -> Optional[IndicatorObservation]:
        if not self.cache:
            return None
        try:
            return self.cache.get(key, IndicatorObservation)
        except redis.RedisError as exc:
            logger.warning(f"Indicator cache read failed for {key}: {exc}")
            return None

    def _store(self, key: str, observation: IndicatorObservation) -> None:
        if not self.cache:
            return
        try:
            self.cache.set(key, observation, self.settings.CACHE_TTL_INDICATORS)
        except redis.RedisError as exc:
            logger.warning(f"Indicator cache write failed for {key}: {exc}")

    def invalidate(self, country_code: str) -> None:
        """Drop every cached observation for one country."""
        if not self.cache:
            return
        try:
            self.cache.delete_pattern(f"indicator:{country_code}:*")
            logger.info(f"Indicator cache invalidated for {country_code}")
        except redis.RedisError as exc:
            logger.warning(f"Indicator cache invalidation failed for {country_code}: {exc}")

    async def _get(self, client: httpx.AsyncClient, country_code: str, indicator: str) -> Any:
        try:
            response = await client.get(
                self._url(country_code, indicator),
                params=self._params(),
                headers=self.headers,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise DataSourceException(
                f"World Bank API error {e.response.status_code} for {indicator}"
            ) from e
        except httpx.HTTPError as e:
            raise DataSourceException(f"World Bank request failed for {indicator}: {e}") from e
        except ValueError as e:
            raise DataSourceException(f"World Bank returned invalid JSON for {indicator}") from e

    async def fetch_observation(
        self, country_code: str, indicator: str
    ) -> Optional[IndicatorObservation]:
        """
        Latest observation for one country/indicator.

        Returns:
            IndicatorObservation, or None when the series has no data.

        Raises:
            DataSourceException: on transport, status or payload errors
        """
        key = indicator_cache_key(country_code, indicator, self.settings.WORLD_BANK_DATE_RANGE)
        cached = self._cached(key)
        if cached:
            logger.debug(f"Indicator cache hit: {key}")
            return cached

        if self._client is not None:
            payload = await self._get(self._client, country_code, indicator)
        else:
            async with httpx.AsyncClient(timeout=self.settings.FETCH_TIMEOUT_SECONDS) as client:
                payload = await self._get(client, country_code, indicator)

        observation = latest_observation(indicator, payload)
        if observation is not None:
            self._store(key, observation)
        return observation

    async def fetch_indicators(
        self, country_code: str, indicators: Iterable[str]
    ) -> Dict[str, Optional[IndicatorObservation]]:
        """
        Fetch several indicators concurrently.

        Each fetch has its own FETCH_TIMEOUT_SECONDS deadline. Failures and
        timeouts become None for that indicator and are logged at WARNING.
        Cancellation of the caller cancels every in-flight fetch.
        """
        codes = list(indicators)
        tasks = [
            asyncio.wait_for(
                self.fetch_observation(country_code, code),
                timeout=self.settings.FETCH_TIMEOUT_SECONDS,
            )
            for code in codes
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        observations: Dict[str, Optional[IndicatorObservation]] = {}
        for code, result in zip(codes, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(
                    f"Indicator fetch failed for {country_code}/{code}: {result!r}",
                    extra={"country_code": country_code, "indicator": code},
                )
                observations[code] = None
            else:
                observations[code] = result
        return observations
