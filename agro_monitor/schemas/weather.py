from pydantic import BaseModel
from typing import List, Optional

class WeatherRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class CurrentWeather(BaseModel):
    temp: int
    condition: str
    humidity: Optional[float] = None
    windSpeed: float
    windDirection: str

class DailyForecast(BaseModel):
    day: str
    temp: int
    condition: str
    humidity: Optional[float] = None
    windSpeed: float

class WeatherResponse(BaseModel):
    current: CurrentWeather
    forecast: List[DailyForecast]
