"""
Sensor reading collector

Polls every sensor that has an external API configured, stores the returned
value in the sensor's ``last_reading`` and notifies all users of the owning
company when the value leaves the configured [min, max] range.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging
import math

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from agro_monitor.database import SessionLocal, settings, get_utc_datetime
from agro_monitor.models.notification import Notification
from agro_monitor.models.profile import Profile
from agro_monitor.models.sensor import Sensor
from agro_monitor.models.zone import Zone
from agro_monitor.schemas.collector import CollectionReport, SensorFetchSuccess, SensorFetchFailure

logger = logging.getLogger(__name__)

ALERT_TITLE = "⚠️ Предупреждение по датчику"
ALERT_TYPE = "warning"
DEFAULT_API_METHOD = "GET"
# Checked in order when the response body is an object
VALUE_FIELDS = ("value", "reading")

BELOW_MIN = "below_min"
ABOVE_MAX = "above_max"


class CollectorConfigurationError(RuntimeError):
    """Storage is not configured, so no collection run can happen"""


@dataclass
class ThresholdViolation:
    kind: str  # BELOW_MIN or ABOVE_MAX
    value: float
    threshold: float

    @property
    def margin(self) -> float:
        return abs(self.value - self.threshold)


def _as_number(candidate: Any) -> Optional[float]:
    # bool is an int subclass but never a reading
    if isinstance(candidate, bool):
        return None
    if not isinstance(candidate, (int, float)):
        return None
    try:
        number = float(candidate)
    except OverflowError:
        return None
    # 1e400 parses to inf
    return number if math.isfinite(number) else None


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def extract_reading_value(payload: Any) -> Optional[float]:
    """Pull the numeric reading out of a sensor API response body.

    A bare JSON number is the reading itself. For an object the ``value``
    field wins over ``reading``. Anything else yields None.
    """
    number = _as_number(payload)
    if number is not None:
        return number

    if isinstance(payload, dict):
        for field in VALUE_FIELDS:
            number = _as_number(payload.get(field))
            if number is not None:
                return number

    return None


def check_thresholds(
    value: float,
    threshold_min: Optional[float],
    threshold_max: Optional[float],
) -> Optional[ThresholdViolation]:
    """Return the violated bound, if any. Values equal to a bound are in range."""
    if threshold_min is not None and value < threshold_min:
        return ThresholdViolation(BELOW_MIN, value, threshold_min)
    if threshold_max is not None and value > threshold_max:
        return ThresholdViolation(ABOVE_MAX, value, threshold_max)
    return None


def _format_number(number: float) -> str:
    rounded = round(number, 3)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


def build_alert_message(sensor_name: str, violation: ThresholdViolation) -> str:
    value = _format_number(violation.value)
    threshold = _format_number(violation.threshold)
    margin = _format_number(violation.margin)

    if violation.kind == BELOW_MIN:
        return (
            f'Показание датчика "{sensor_name}" ниже порогового значения: '
            f"{value} < {threshold} (на {margin})"
        )
    return (
        f'Показание датчика "{sensor_name}" превышает пороговое значение: '
        f"{value} > {threshold} (на {margin})"
    )


def build_request_headers(config: Dict[str, Any]) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    api_key = config.get("apiKey")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


async def fetch_sensor_value(client: httpx.AsyncClient, config: Dict[str, Any]) -> Optional[float]:
    """Call the sensor's API once and extract its reading.

    Raises httpx.HTTPError on transport errors and non-2xx statuses, and
    ValueError when the body is not strict JSON (NaN and Infinity included).
    """
    method = (config.get("apiMethod") or DEFAULT_API_METHOD).upper()
    response = await client.request(method, config["apiUrl"], headers=build_request_headers(config))
    response.raise_for_status()
    return extract_reading_value(response.json(parse_constant=_reject_constant))


def get_configured_sensors(db: Session) -> List[Sensor]:
    """Sensors with an API URL whose zone exists, in id order"""
    sensors = (
        db.query(Sensor)
        .join(Zone)
        .options(joinedload(Sensor.zone))
        .order_by(Sensor.id)
        .all()
    )
    return [sensor for sensor in sensors if sensor.api_config.get("apiUrl")]


def store_reading(db: Session, sensor: Sensor, value: Optional[float]) -> bool:
    """Merge value and timestamp into last_reading, keeping the API config.

    A failed write is logged and rolled back; the previous reading stays.
    """
    sensor_id = sensor.id
    sensor.last_reading = {
        **sensor.api_config,
        "value": value,
        "timestamp": get_utc_datetime().isoformat(),
    }
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating sensor {sensor_id}: {str(e)}")
        return False
    return True


def notify_company_users(db: Session, sensor: Sensor, violation: ThresholdViolation) -> int:
    """Create one warning notification per user of the sensor's company"""
    company_id = sensor.zone.company_id
    profiles = db.query(Profile).filter(Profile.company_id == company_id).all()
    message = build_alert_message(sensor.name, violation)

    try:
        for profile in profiles:
            db.add(Notification(
                user_id=profile.id,
                title=ALERT_TITLE,
                message=message,
                type=ALERT_TYPE,
            ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return len(profiles)


async def collect_sensor_readings(db: Session, client: httpx.AsyncClient) -> CollectionReport:
    """Poll all configured sensors one after another.

    A failure for one sensor is recorded in its result entry and never stops
    the others. Errors while selecting sensors propagate to the caller.
    """
    sensors = get_configured_sensors(db)
    logger.info(f"Found {len(sensors)} sensors with API configuration")

    results = []
    for sensor in sensors:
        sensor_id = sensor.id
        try:
            config = sensor.api_config
            logger.info(f"Fetching data for sensor {sensor_id} from {config['apiUrl']}")

            value = await fetch_sensor_value(client, config)
            logger.info(f"Received value {value} for sensor {sensor_id}")

            store_reading(db, sensor, value)

            if sensor.alert_enabled and value is not None:
                violation = check_thresholds(value, sensor.threshold_min, sensor.threshold_max)
                if violation:
                    notified = notify_company_users(db, sensor, violation)
                    logger.info(f"Threshold exceeded for sensor {sensor_id} ({violation.kind}), notified {notified} users")

            results.append(SensorFetchSuccess(sensor_id=sensor_id, value=value))
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(f"Error processing sensor {sensor_id}: {error}")
            results.append(SensorFetchFailure(sensor_id=sensor_id, error=error))

    return CollectionReport(success=True, results=results)


def ensure_storage_configured():
    if not settings.database_url:
        raise CollectorConfigurationError("DATABASE_URL is not configured")


async def run_collection() -> CollectionReport:
    """One standalone collection run with its own session and HTTP client"""
    ensure_storage_configured()
    db = SessionLocal()
    try:
        async with httpx.AsyncClient(timeout=settings.sensor_http_timeout) as client:
            return await collect_sensor_readings(db, client)
    finally:
        db.close()
