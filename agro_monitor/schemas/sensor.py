from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional, Dict, Any, Literal

class SensorApiConfig(BaseModel):
    apiUrl: Optional[str] = None
    apiKey: Optional[str] = None
    apiMethod: Literal["GET", "POST"] = "GET"

class SensorCreate(BaseModel):
    zone_id: int
    name: str
    sensor_type: str
    serial_number: Optional[str] = None
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)
    calibration_date: Optional[date] = None
    threshold_min: Optional[float] = None
    threshold_max: Optional[float] = None
    alert_enabled: bool = False
    api: Optional[SensorApiConfig] = None

class SensorSettingsUpdate(BaseModel):
    """Payload of the sensor settings form: API connection plus alert thresholds"""
    apiUrl: Optional[str] = None
    apiKey: Optional[str] = None
    apiMethod: Literal["GET", "POST"] = "GET"
    thresholdMin: Optional[float] = None
    thresholdMax: Optional[float] = None
    alertEnabled: bool = False

class SensorResponse(BaseModel):
    id: int
    zone_id: int
    name: str
    sensor_type: str
    serial_number: Optional[str] = None
    status: Optional[str] = None
    battery_level: Optional[int] = None
    calibration_date: Optional[date] = None
    last_reading: Optional[Dict[str, Any]] = None
    has_api_key: bool = False
    threshold_min: Optional[float] = None
    threshold_max: Optional[float] = None
    alert_enabled: Optional[bool] = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

    @field_validator("last_reading")
    @classmethod
    def hide_api_key(cls, value):
        if not value:
            return value
        return {k: v for k, v in value.items() if k != "apiKey"}
