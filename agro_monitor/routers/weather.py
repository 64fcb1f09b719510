from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import httpx
import logging

from agro_monitor.database import settings
from agro_monitor.providers import GismeteoProvider, get_http_client
from agro_monitor.schemas.weather import WeatherRequest, WeatherResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/weather", tags=["weather"])

@router.post("", response_model=WeatherResponse)
async def get_weather(request: WeatherRequest, client: httpx.AsyncClient = Depends(get_http_client)):
    """Current weather and 3 day forecast for a point"""
    if request.latitude is None or request.longitude is None:
        return JSONResponse(status_code=400, content={"error": "Latitude and longitude are required"})

    provider = GismeteoProvider(settings.gismeteo_api_key, settings.gismeteo_api_base, client)
    try:
        return await provider.get_weather(request.latitude, request.longitude)
    except Exception as e:
        logger.error(f"Weather fetch error: {str(e)}")
        return JSONResponse(status_code=500, content={"error": str(e)})
