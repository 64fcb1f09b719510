from .zone import ZoneResponse, ZoneCreate
from .sensor import SensorResponse, SensorCreate, SensorSettingsUpdate, SensorApiConfig
from .notification import NotificationResponse
from .collector import CollectionReport, SensorFetchSuccess, SensorFetchFailure
from .weather import WeatherRequest, WeatherResponse

__all__ = [
    "ZoneResponse",
    "ZoneCreate",
    "SensorResponse",
    "SensorCreate",
    "SensorSettingsUpdate",
    "SensorApiConfig",
    "NotificationResponse",
    "CollectionReport",
    "SensorFetchSuccess",
    "SensorFetchFailure",
    "WeatherRequest",
    "WeatherResponse"
]
