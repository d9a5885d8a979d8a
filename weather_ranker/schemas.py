from typing import List, Optional, Union

from pydantic import BaseModel


class ComfortComponents(BaseModel):
    """Inputs and sub-scores behind a comfort score.

    Notes
    -----
    - `tempC` is rounded to one decimal; each `*Score` is an integer in [0, 100].
    - `humidity` (%), `wind` (m/s) and `clouds` (%) are the provider values as read.
    """

    tempC: float
    tempScore: int
    humidity: float
    humidityScore: int
    wind: float
    windScore: int
    clouds: float
    cloudScore: int


class ComfortResult(BaseModel):
    score: int
    components: ComfortComponents


class CityReport(BaseModel):
    """Scored weather for one city.

    Notes
    -----
    - `rank` is set only in the all-cities list, 1 being the most comfortable.
    - `cacheHit` tells whether the underlying reading came from the raw cache.
    """

    cityId: int
    name: Optional[str] = None
    weatherDescription: Optional[str] = None
    temperatureK: float
    temperatureC: float
    comfortScore: int
    components: ComfortComponents
    cacheHit: bool
    rank: Optional[int] = None


class CityErrorReport(BaseModel):
    cityId: int
    name: Optional[str] = None
    error: str


Report = Union[CityReport, CityErrorReport]


class AllWeatherResponse(BaseModel):
    data: List[Report]
    cacheHit: bool
    error: Optional[str] = None


class RawCacheEntryStatus(BaseModel):
    cityId: int
    fetchedAt: int
    expiresAt: int
    ttlMs: int


class ProcessedCacheStatus(BaseModel):
    cachedAt: int
    expiresAt: int
    ttlMs: int


class CacheStatus(BaseModel):
    """Snapshot of both caches. All times are epoch milliseconds."""

    rawCacheCount: int
    rawEntries: List[RawCacheEntryStatus]
    processedCache: Optional[ProcessedCacheStatus] = None
