"""
Gismeteo provider: current conditions and a 3 day forecast from Gismeteo
"""
from typing import Any, Dict, List, Optional
import logging
import math

import httpx

logger = logging.getLogger(__name__)

CONDITIONS = {
    0: "Ясно",
    1: "Малооблачно",
    2: "Облачно",
    3: "Пасмурно",
    4: "Дождь",
    5: "Ливень",
    6: "Снег",
    7: "Гроза",
}
DEFAULT_CONDITION = "Облачно"

WIND_DIRECTIONS = ["С", "СВ", "В", "ЮВ", "Ю", "ЮЗ", "З", "СЗ"]
DAY_LABELS = ["Сегодня", "Завтра", "Послезавтра"]
FORECAST_DAYS = 3

# Served when no Gismeteo key is configured
DEMO_WEATHER = {
    "current": {
        "temp": 20,
        "condition": "Облачно",
        "humidity": 65,
        "windSpeed": 3.5,
        "windDirection": "СЗ",
    },
    "forecast": [
        {"day": "Сегодня", "temp": 20, "condition": "Облачно", "humidity": 65, "windSpeed": 3.5},
        {"day": "Завтра", "temp": 22, "condition": "Ясно", "humidity": 60, "windSpeed": 2.8},
        {"day": "Послезавтра", "temp": 19, "condition": "Дождь", "humidity": 75, "windSpeed": 5.2},
    ],
}


class WeatherProviderError(RuntimeError):
    pass


def _round_half_up(number: float) -> int:
    return int(math.floor(number + 0.5))


def format_condition(code: Optional[int]) -> str:
    return CONDITIONS.get(code, DEFAULT_CONDITION)


def format_wind_direction(degrees: float) -> str:
    index = _round_half_up(degrees / 45) % 8
    return WIND_DIRECTIONS[index]


def _round_wind(speed: float) -> float:
    return _round_half_up(speed * 10) / 10


class GismeteoProvider:
    """Client for the Gismeteo v2 weather API"""

    def __init__(self, api_key: str, base_url: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = client

        if not api_key:
            logger.error("GISMETEO_API_KEY not configured - serving demo weather data")

    @property
    def demo_mode(self) -> bool:
        return not self.api_key

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        response = await self.client.get(
            f"{self.base_url}{path}",
            params=params,
            headers={
                "X-Gismeteo-Token": self.api_key,
                "Accept": "application/json",
            },
        )
        if not response.is_success:
            raise WeatherProviderError(f"Gismeteo API error: {response.status_code}")
        return response.json()["response"]

    async def get_weather(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Current weather plus forecast for the given point"""
        if self.demo_mode:
            return DEMO_WEATHER

        coords = {"latitude": latitude, "longitude": longitude}
        current = await self._get("/weather/current/", coords)
        forecast = await self._get("/weather/forecast/", {**coords, "days": FORECAST_DAYS})

        logger.info(f"Fetched Gismeteo weather for ({latitude}, {longitude})")

        return {
            "current": self.normalize_current(current),
            "forecast": self.normalize_forecast(forecast),
        }

    @staticmethod
    def normalize_current(current: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "temp": _round_half_up(current["temperature"]["air"]["C"]),
            "condition": format_condition(current["description"].get("weather_code")),
            "humidity": current["humidity"]["percent"],
            "windSpeed": _round_wind(current["wind"]["speed"]["m_s"]),
            "windDirection": format_wind_direction(current["wind"]["direction"]["degree"]),
        }

    @staticmethod
    def normalize_forecast(days: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        forecast = []
        for label, day in zip(DAY_LABELS, days[:FORECAST_DAYS]):
            forecast.append({
                "day": label,
                "temp": _round_half_up(day["temperature"]["air"]["C"]),
                "condition": format_condition(day["description"].get("weather_code")),
                "humidity": day["humidity"]["percent"],
                "windSpeed": _round_wind(day["wind"]["speed"]["m_s"]),
            })
        return forecast
