from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CITIES_FILE = Path(__file__).resolve().parent / "data" / "cities.json"


class Settings(BaseSettings):
    """Runtime configuration for the API.

    Notes
    -----
    - Values are read from environment variables (case-insensitive) and an
      optional `.env` file, e.g. `OPENWEATHER_API_KEY`, `OPENWEATHER_URL`.
    - An empty `openweather_api_key` means the provider is not configured;
      the all-cities endpoint then answers with an empty list and an error.
    - TTLs (time-to-live) are expressed in seconds and control how long cached
      readings and rankings are considered fresh.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    openweather_api_key: str = ""
    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    cities_file: Path = _DEFAULT_CITIES_FILE
    # TTLs (in seconds) for the in-memory caches
    cache_ttl_raw: int = 5 * 60  # per-city provider responses
    cache_ttl_processed: int = 60  # ranked all-cities list
    request_timeout: float = 10.0
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"


settings = Settings()
