from .gismeteo_provider import GismeteoProvider, WeatherProviderError
from .http_client import get_http_client

__all__ = [
    "GismeteoProvider",
    "WeatherProviderError",
    "get_http_client"
]
