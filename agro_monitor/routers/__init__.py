from .health import router as health_router
from .zones import router as zones_router
from .sensors import router as sensors_router
from .notifications import router as notifications_router
from .weather import router as weather_router

__all__ = [
    "health_router",
    "zones_router",
    "sensors_router",
    "notifications_router",
    "weather_router"
]
