from typing import Any, Dict, List, Optional

import pytest

from weather_ranker.aggregator import WeatherAggregator
from weather_ranker.cities import CityDirectory, CityRef
from weather_ranker.errors import ConfigError, ProviderError


def make_reading(temp_k: float = 295.15, humidity: float = 50, wind: float = 0, clouds: float = 20,
                 description: str = "clear sky", name: str = "TestCity") -> Dict[str, Any]:
    """Factory for OpenWeatherMap /weather response dicts."""
    return {
        "weather": [{"id": 800, "main": "Clear", "description": description}],
        "main": {"temp": temp_k, "humidity": humidity},
        "wind": {"speed": wind},
        "clouds": {"all": clouds},
        "name": name,
        "cod": 200,
    }


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProviderClient:
    """Serves canned readings per city id; an exception instance is raised instead."""

    def __init__(self, readings: Optional[Dict[int, Any]] = None, api_key: str = "test-key"):
        self.readings = readings or {}
        self.api_key = api_key
        self.calls: List[int] = []

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def fetch(self, city_id: int) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigError("OPENWEATHER_API_KEY not set in environment")
        self.calls.append(city_id)
        reading = self.readings.get(city_id)
        if reading is None:
            raise ProviderError("OpenWeather API error 404: city not found", status=404)
        if isinstance(reading, Exception):
            raise reading
        return reading


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cities():
    return [CityRef(1, "Colombo"), CityRef(2, "Tokyo"), CityRef(3, "Oslo")]


@pytest.fixture
def provider():
    return FakeProviderClient({
        1: make_reading(temp_k=273.15 + 30, humidity=80, name="Colombo"),
        2: make_reading(temp_k=295.15, humidity=50, name="Tokyo"),
        3: make_reading(temp_k=273.15, humidity=50, name="Oslo"),
    })


@pytest.fixture
def aggregator(provider, cities, clock):
    return WeatherAggregator(client=provider, directory=CityDirectory(cities), clock=clock,
                             raw_ttl=300, processed_ttl=60)
