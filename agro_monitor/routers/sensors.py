# agro_monitor/routers/sensors.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session
import httpx
import logging

from agro_monitor.database import get_db
from agro_monitor.models.sensor import Sensor
from agro_monitor.models.zone import Zone
from agro_monitor.providers import get_http_client
from agro_monitor.schemas.collector import CollectionReport
from agro_monitor.schemas.sensor import SensorResponse, SensorCreate, SensorSettingsUpdate
from agro_monitor.services.sensor_collector import collect_sensor_readings, ensure_storage_configured

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sensors", tags=["sensors"])

# ---------- Collector: polls every sensor with an API configured ----------
@router.options("/collect")
async def collect_preflight():
    return PlainTextResponse("ok")

@router.api_route("/collect", methods=["GET", "POST"], response_model=CollectionReport)
async def collect(db: Session = Depends(get_db), client: httpx.AsyncClient = Depends(get_http_client)):
    """Fetch fresh readings for all configured sensors and raise threshold alerts"""
    try:
        ensure_storage_configured()
        return await collect_sensor_readings(db, client)
    except Exception as e:
        logger.error(f"Error in sensor collection: {str(e)}")
        return JSONResponse(status_code=500, content={"error": str(e)})

# ---------- Helpers ----------
def _get_sensor_or_404(db: Session, sensor_id: int) -> Sensor:
    sensor = db.query(Sensor).filter(Sensor.id == sensor_id).first()
    if not sensor:
        raise HTTPException(status_code=404, detail="Sensor not found")
    return sensor

def _merge_api_config(current: dict, api_url: Optional[str], api_key: Optional[str], api_method: str) -> dict:
    """Write API settings into last_reading, keeping value/timestamp.

    api_key None keeps the stored key, an empty string removes it.
    """
    merged = dict(current)
    merged["apiUrl"] = api_url or None
    merged["apiMethod"] = api_method
    if api_key is not None:
        if api_key:
            merged["apiKey"] = api_key
        else:
            merged.pop("apiKey", None)
    return merged

# ---------- CRUD ----------
@router.get("/", response_model=List[SensorResponse])
async def list_sensors(zone_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Get all sensors, optionally for one zone"""
    query = db.query(Sensor)
    if zone_id is not None:
        query = query.filter(Sensor.zone_id == zone_id)
    return query.order_by(Sensor.id).all()

@router.post("/", response_model=SensorResponse)
async def create_sensor(payload: SensorCreate, db: Session = Depends(get_db)):
    """Create new sensor in an existing zone"""
    zone = db.query(Zone).filter(Zone.id == payload.zone_id).first()
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")

    data = payload.model_dump(exclude={"api"})
    last_reading = None
    if payload.api is not None:
        last_reading = _merge_api_config({}, payload.api.apiUrl, payload.api.apiKey, payload.api.apiMethod)

    sensor = Sensor(**data, last_reading=last_reading)
    db.add(sensor)
    db.commit()
    db.refresh(sensor)
    return sensor

@router.get("/{sensor_id}", response_model=SensorResponse)
async def get_sensor(sensor_id: int, db: Session = Depends(get_db)):
    """Get sensor by ID"""
    return _get_sensor_or_404(db, sensor_id)

@router.put("/{sensor_id}/settings", response_model=SensorResponse)
async def update_sensor_settings(sensor_id: int, payload: SensorSettingsUpdate, db: Session = Depends(get_db)):
    """Save API connection and alert thresholds of a sensor"""
    if payload.thresholdMin is not None and payload.thresholdMax is not None and payload.thresholdMin > payload.thresholdMax:
        raise HTTPException(status_code=400, detail="thresholdMin must not exceed thresholdMax")

    sensor = _get_sensor_or_404(db, sensor_id)

    sensor.last_reading = _merge_api_config(sensor.api_config, payload.apiUrl, payload.apiKey, payload.apiMethod)
    sensor.threshold_min = payload.thresholdMin
    sensor.threshold_max = payload.thresholdMax
    sensor.alert_enabled = payload.alertEnabled

    db.commit()
    db.refresh(sensor)
    logger.info(f"Updated settings for sensor {sensor_id}")
    return sensor

@router.delete("/{sensor_id}")
async def delete_sensor(sensor_id: int, db: Session = Depends(get_db)):
    """Delete a sensor"""
    sensor = _get_sensor_or_404(db, sensor_id)
    db.delete(sensor)
    db.commit()
    return {"ok": True, "sensor_id": sensor_id}
