import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .aggregator import WeatherAggregator
from .cities import CityDirectory, CityRef
from .errors import NotFoundError, WeatherRankerError
from .openweather_client import OpenWeatherClient
from .schemas import AllWeatherResponse, CacheStatus, Report
from .settings import settings

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Weather Comfort Ranking API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

aggregator = WeatherAggregator(
    client=OpenWeatherClient(),
    directory=CityDirectory.from_file(settings.cities_file),
)


def get_aggregator() -> WeatherAggregator:
    return aggregator


async def resolve_city_report(agg: WeatherAggregator, city_id: int) -> Report:
    """Find a single city's report.

    Resolution is two-step: the entry from the all-cities list when the city
    is part of it, otherwise a direct fetch and score for `city_id`.

    Raises
    ------
    NotFoundError
        If the direct fetch fails (unknown id, provider error, missing key).
    """

    found = await agg.find_report(city_id)
    if found is not None:
        return found
    city = CityRef(id=city_id)
    try:
        result = await agg.get_city_weather(city)
        return agg.build_report(city, result.reading, result.cache_hit)
    except WeatherRankerError as exc:
        raise NotFoundError(str(exc)) from exc


@app.get("/health")
async def health():
    """Liveness probe for the service.

    Returns
    -------
    dict
        A fixed payload `{"status": "ok"}` used by orchestrators and uptime checks.
    """

    return {"status": "ok"}


@app.get("/weather", response_model=AllWeatherResponse, response_model_exclude_none=True)
async def all_weather(agg: WeatherAggregator = Depends(get_aggregator)):
    """Return every configured city, ranked by comfort score.

    Returns
    -------
    AllWeatherResponse
        `data` holds ranked reports (best first) followed by per-city error
        entries; `cacheHit` tells whether the ranked list came from cache.

    Notes
    -----
    - Always 200: upstream failures show up as entries with an `error` field,
      a missing API key as an empty `data` plus top-level `error`.
    - The ranked list is cached for `cache_ttl_processed` seconds and the raw
      per-city readings for `cache_ttl_raw` seconds.
    """

    result = await agg.get_all_weather()
    return AllWeatherResponse(data=result.reports, cacheHit=result.cache_hit, error=result.error)


@app.get("/weather/cache", response_model=CacheStatus)
async def cache_status(agg: WeatherAggregator = Depends(get_aggregator)):
    """Diagnostic view of both caches (times in epoch milliseconds). Never triggers fetches."""

    return agg.get_cache_status()


@app.get("/weather/{city_id}", response_model=Report, response_model_exclude_none=True)
async def city_weather(city_id: str, agg: WeatherAggregator = Depends(get_aggregator)):
    """Return the report for a single city.

    Parameters
    ----------
    city_id : str
        OpenWeatherMap city id. Cities outside the configured list are fetched
        directly.

    Raises
    ------
    HTTPException
        404 if `city_id` is not an integer, or if the city cannot be fetched
        (the detail carries the provider's message).
    """

    try:
        cid = int(city_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Invalid city id")
    try:
        return await resolve_city_report(agg, cid)
    except NotFoundError as exc:
        logger.info("City %s not found: %s", cid, exc)
        raise HTTPException(status_code=404, detail=str(exc))
