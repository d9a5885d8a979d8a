import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ConfigError, ProviderError
from .settings import settings

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """Thin async client for the OpenWeatherMap current-weather endpoint.

    Parameters
    ----------
    api_key : Optional[str]
        OpenWeatherMap `appid`. Defaults to `settings.openweather_api_key`.
    base_url : Optional[str]
        Current-weather endpoint. Defaults to `settings.openweather_url`.
    timeout : Optional[float]
        Per-request timeout in seconds. Defaults to `settings.request_timeout`.
    transport : Optional[httpx.AsyncBaseTransport]
        Custom transport, e.g. `httpx.MockTransport` in tests.

    Notes
    -----
    - No retries: a failed request surfaces immediately as `ProviderError`.
    - Caching is the caller's concern (see `WeatherAggregator`).
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key if api_key is not None else settings.openweather_api_key
        self.base_url = base_url or settings.openweather_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_json(self, params: Dict[str, Any]) -> Any:
        """Perform a GET request against `base_url` and return the parsed JSON payload.

        Raises
        ------
        ProviderError
            For 4xx/5xx responses, timeouts, transport errors and invalid JSON.
        """

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                r = await client.get(self.base_url, params=params)
            except httpx.TimeoutException as exc:
                raise ProviderError("OpenWeather request timed out") from exc
            except httpx.RequestError as exc:
                raise ProviderError(f"Network error while calling OpenWeather: {exc}") from exc
        if not r.is_success:
            raise ProviderError(f"OpenWeather API error {r.status_code}: {r.text}", status=r.status_code)
        try:
            return r.json()
        except ValueError as exc:
            raise ProviderError(f"Failed to parse OpenWeather response: {exc}", status=r.status_code) from exc

    async def fetch(self, city_id: int) -> Dict[str, Any]:
        """Fetch the current weather for one city.

        Parameters
        ----------
        city_id : int
            OpenWeatherMap city id, sent as the `id` query parameter.

        Returns
        -------
        Dict[str, Any]
            Raw payload as returned by OpenWeatherMap (temperatures in Kelvin).

        Raises
        ------
        ConfigError
            If no API key is configured.
        ProviderError
            If the request fails or the payload is not a JSON object.
        """

        if not self.is_configured():
            raise ConfigError("OPENWEATHER_API_KEY not set in environment")
        logger.info("Fetching weather for city %s from OpenWeatherMap", city_id)
        data = await self._get_json({"id": city_id, "appid": self.api_key})
        if not isinstance(data, dict):
            raise ProviderError("Unexpected OpenWeather payload: expected a JSON object")
        return data
