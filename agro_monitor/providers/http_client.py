import httpx

from agro_monitor.database import settings

async def get_http_client():
    """Shared outbound HTTP client for one request"""
    async with httpx.AsyncClient(timeout=settings.sensor_http_timeout) as client:
        yield client
