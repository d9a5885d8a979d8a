"""
WeatherAggregator: two-tier cached, comfort-ranked weather for a city list.

Caches (memory only, lost on restart):
  raw        city id -> provider reading     TTL settings.cache_ttl_raw (5 min)
  processed  the ranked all-cities list      TTL settings.cache_ttl_processed (1 min)

The processed list refreshes more eagerly than the raw readings expire, so
most refreshes re-rank readings already held in the raw cache.

Concurrent get_all_weather() calls may each run the fetch loop; the last one
to finish overwrites the processed entry. Cache writes happen between awaits
on a single event loop, so no locking is needed.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .cache import TTLCache
from .cities import CityDirectory, CityRef
from .comfort import compute_comfort_score, kelvin_to_celsius, round_half_up
from .errors import ProviderError
from .schemas import (
    CacheStatus,
    CityErrorReport,
    CityReport,
    ComfortResult,
    ProcessedCacheStatus,
    RawCacheEntryStatus,
    Report,
)
from .settings import settings

logger = logging.getLogger(__name__)

_PROCESSED_KEY = "all"
_NOT_CONFIGURED = "OPENWEATHER_API_KEY not set in environment"


class ProviderClient(Protocol):
    def is_configured(self) -> bool: ...

    async def fetch(self, city_id: int) -> Dict[str, Any]: ...


@dataclass
class CityWeather:
    reading: Dict[str, Any]
    cache_hit: bool


@dataclass
class AllWeather:
    reports: List[Report] = field(default_factory=list)
    cache_hit: bool = False
    error: Optional[str] = None


def _to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def _description(weather: Any) -> Optional[str]:
    if not weather:
        return None
    if not isinstance(weather, list) or not isinstance(weather[0], dict):
        raise ProviderError("Unexpected OpenWeather payload: 'weather' is not a list of objects")
    description = weather[0].get("description")
    return str(description) if description is not None else None


def _copy_reports(reports: List[Report]) -> List[Report]:
    # callers get their own instances; the cached list stays untouched
    return [r.model_copy(deep=True) for r in reports]


class WeatherAggregator:
    """Fetches, scores, ranks and caches weather for every city in a directory.

    Parameters
    ----------
    client : ProviderClient
        Source of raw readings, e.g. `OpenWeatherClient`.
    directory : CityDirectory
        Cities to report on, in display order.
    clock : Callable[[], float]
        Returns seconds since the epoch. Shared by both caches.
    raw_ttl, processed_ttl : Optional[float]
        Cache lifetimes in seconds. Default to the values in `settings`.
    """

    def __init__(self, client: ProviderClient, directory: CityDirectory,
                 clock: Callable[[], float] = time.time,
                 raw_ttl: Optional[float] = None, processed_ttl: Optional[float] = None):
        self.client = client
        self.directory = directory
        self.clock = clock
        self.raw_cache: TTLCache[Dict[str, Any]] = TTLCache(
            raw_ttl if raw_ttl is not None else settings.cache_ttl_raw, clock)
        self.processed_cache: TTLCache[List[Report]] = TTLCache(
            processed_ttl if processed_ttl is not None else settings.cache_ttl_processed, clock)

    compute_comfort_score = staticmethod(compute_comfort_score)

    async def get_city_weather(self, city: CityRef) -> CityWeather:
        """Return the reading for `city`, from the raw cache when still fresh.

        Raises
        ------
        ConfigError, ProviderError
            Propagated from the provider client; nothing is cached on failure.
        """

        cached = self.raw_cache.get(city.id)
        if cached is not None:
            logger.debug("Raw cache hit for city %s", city.id)
            return CityWeather(reading=cached, cache_hit=True)
        logger.debug("Raw cache miss for city %s", city.id)
        reading = await self.client.fetch(city.id)
        self.raw_cache.set(city.id, reading)
        return CityWeather(reading=reading, cache_hit=False)

    def build_report(self, city: CityRef, reading: Dict[str, Any], cache_hit: bool) -> CityReport:
        """Score a reading and shape it into a `CityReport` (without rank).

        Raises
        ------
        ProviderError
            If the reading carries no temperature or is malformed.
        """

        main = reading.get("main")
        if not isinstance(main, dict) or main.get("temp") is None:
            raise ProviderError("OpenWeather response has no temperature")
        comfort: ComfortResult = compute_comfort_score(reading)
        temp_k = float(main["temp"])
        return CityReport(
            cityId=city.id,
            name=city.name or reading.get("name"),
            weatherDescription=_description(reading.get("weather")),
            temperatureK=temp_k,
            temperatureC=round_half_up(kelvin_to_celsius(temp_k), 1),
            comfortScore=comfort.score,
            components=comfort.components,
            cacheHit=cache_hit,
        )

    async def get_all_weather(self) -> AllWeather:
        """Return every city's report, ranked by comfort. Never raises.

        Notes
        -----
        - A fresh processed entry is returned with `cache_hit=True`; callers
          always receive copies, so edits never reach the cache.
        - Without provider credentials an empty list with `error` is returned
          and the processed cache is left untouched.
        - Per-city failures become `CityErrorReport` entries placed after
          all ranked entries; they never abort the batch.
        """

        cached = self.processed_cache.get(_PROCESSED_KEY)
        if cached is not None:
            logger.debug("Processed cache hit")
            return AllWeather(reports=_copy_reports(cached), cache_hit=True)

        if not self.client.is_configured():
            logger.warning("OPENWEATHER_API_KEY is not set; cannot fetch weather data")
            return AllWeather(reports=[], cache_hit=False, error=_NOT_CONFIGURED)

        if len(self.directory) == 0:
            logger.info("Cities list empty, attempting to reload")
            self.directory.reload()

        scored: List[CityReport] = []
        failed: List[CityErrorReport] = []
        for city in self.directory:
            try:
                result = await self.get_city_weather(city)
                scored.append(self.build_report(city, result.reading, result.cache_hit))
            except Exception as exc:
                logger.warning("Failed to fetch/process city %s: %s", city.id, exc)
                failed.append(CityErrorReport(cityId=city.id, name=city.name, error=str(exc) or "unknown error"))

        # sorted() is stable: equal scores keep directory order
        ranked = sorted(scored, key=lambda r: -r.comfortScore)
        reports: List[Report] = [r.model_copy(update={"rank": i}) for i, r in enumerate(ranked, start=1)]
        reports.extend(failed)

        self.processed_cache.set(_PROCESSED_KEY, reports)
        return AllWeather(reports=_copy_reports(reports), cache_hit=False)

    async def find_report(self, city_id: int) -> Optional[Report]:
        """Look `city_id` up in the (possibly cached) all-cities list."""

        result = await self.get_all_weather()
        return next((r for r in result.reports if r.cityId == city_id), None)

    def get_cache_status(self) -> CacheStatus:
        """Read-only snapshot of both caches, times in epoch milliseconds."""

        now_ms = _to_ms(self.clock())
        raw_ttl_ms = _to_ms(self.raw_cache.ttl)
        entries = []
        for city_id, fetched_at in self.raw_cache.items():
            fetched_ms = _to_ms(fetched_at)
            expires_ms = fetched_ms + raw_ttl_ms
            entries.append(RawCacheEntryStatus(
                cityId=city_id,
                fetchedAt=fetched_ms,
                expiresAt=expires_ms,
                ttlMs=max(0, expires_ms - now_ms),
            ))

        processed = None
        cached_at = self.processed_cache.stored_at(_PROCESSED_KEY)
        if cached_at is not None:
            cached_ms = _to_ms(cached_at)
            expires_ms = cached_ms + _to_ms(self.processed_cache.ttl)
            processed = ProcessedCacheStatus(
                cachedAt=cached_ms,
                expiresAt=expires_ms,
                ttlMs=max(0, expires_ms - now_ms),
            )

        return CacheStatus(rawCacheCount=len(self.raw_cache), rawEntries=entries, processedCache=processed)
