"""Comfort score: how pleasant the current weather is, from 0 to 100.

Each input is scored against a reference point and the sub-scores are
combined with fixed weights::

    temperature  ideal 22 °C, -4 points per degree away        weight 0.4
    humidity     ideal 50 %, -1.5 points per percent away      weight 0.3
    wind         free up to 3 m/s, -20 points per m/s above    weight 0.2
    clouds       ideal 20 %, -0.8 points per percent away      weight 0.1
"""

import math
from typing import Any, Dict

from .errors import ProviderError
from .schemas import ComfortComponents, ComfortResult

KELVIN_OFFSET = 273.15

IDEAL_TEMP_C = 22.0
TEMP_PENALTY_PER_DEGREE = 4.0
IDEAL_HUMIDITY = 50.0
HUMIDITY_PENALTY_PER_PERCENT = 1.5
CALM_WIND_MS = 3.0
WIND_PENALTY_PER_MS = 20.0
IDEAL_CLOUDS = 20.0
CLOUD_PENALTY_PER_PERCENT = 0.8

WEIGHT_TEMP = 0.4
WEIGHT_HUMIDITY = 0.3
WEIGHT_WIND = 0.2
WEIGHT_CLOUDS = 0.1


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, ndigits: int = 0) -> float:
    # Python's round() is banker's rounding; scores round .5 upwards
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def kelvin_to_celsius(k: float) -> float:
    return k - KELVIN_OFFSET


def _section(reading: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = reading.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ProviderError(f"Unexpected OpenWeather payload: '{key}' is not an object")
    return value


def _number(value: Any, field: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ProviderError(f"Unexpected OpenWeather payload: '{field}' is not a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ProviderError(f"Unexpected OpenWeather payload: '{field}' is not a number") from None
    if not math.isfinite(number):
        raise ProviderError(f"Unexpected OpenWeather payload: '{field}' is not finite")
    return number


def compute_comfort_score(reading: Dict[str, Any]) -> ComfortResult:
    """Score a raw OpenWeatherMap reading.

    Missing fields count as 0. The total is computed from the unrounded
    sub-scores; only the reported components are rounded.

    Raises
    ------
    ProviderError
        If a section is not an object or a value is not a finite number.
    """

    main = _section(reading, "main")
    temp_k = _number(main.get("temp"), "main.temp")
    humidity = _number(main.get("humidity"), "main.humidity")
    wind = _number(_section(reading, "wind").get("speed"), "wind.speed")
    clouds = _number(_section(reading, "clouds").get("all"), "clouds.all")

    temp_c = kelvin_to_celsius(temp_k)
    temp_score = _clamp(100 - abs(temp_c - IDEAL_TEMP_C) * TEMP_PENALTY_PER_DEGREE)
    humidity_score = _clamp(100 - abs(humidity - IDEAL_HUMIDITY) * HUMIDITY_PENALTY_PER_PERCENT)
    wind_penalty = max(0.0, wind - CALM_WIND_MS)
    wind_score = _clamp(100 - wind_penalty * WIND_PENALTY_PER_MS)
    cloud_score = _clamp(100 - abs(clouds - IDEAL_CLOUDS) * CLOUD_PENALTY_PER_PERCENT)

    total = (
        WEIGHT_TEMP * temp_score
        + WEIGHT_HUMIDITY * humidity_score
        + WEIGHT_WIND * wind_score
        + WEIGHT_CLOUDS * cloud_score
    )
    return ComfortResult(
        score=int(round_half_up(_clamp(total))),
        components=ComfortComponents(
            tempC=round_half_up(temp_c, 1),
            tempScore=int(round_half_up(temp_score)),
            humidity=humidity,
            humidityScore=int(round_half_up(humidity_score)),
            wind=wind,
            windScore=int(round_half_up(wind_score)),
            clouds=clouds,
            cloudScore=int(round_half_up(cloud_score)),
        ),
    )
