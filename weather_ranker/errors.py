from typing import Optional


class WeatherRankerError(Exception):
    """Base class for errors raised by the weather ranking service."""


class ConfigError(WeatherRankerError):
    """Provider credentials are missing."""


class ProviderError(WeatherRankerError):
    """The weather provider could not deliver a usable reading.

    Parameters
    ----------
    message : str
        Human-readable description, safe to show to API clients.
    status : Optional[int]
        HTTP status returned by the provider, when there was a response.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class NotFoundError(WeatherRankerError):
    """A city id could not be resolved to a report."""
