from .sensor_collector import (
    CollectorConfigurationError,
    collect_sensor_readings,
    extract_reading_value,
    check_thresholds,
    run_collection,
)

__all__ = [
    "CollectorConfigurationError",
    "collect_sensor_readings",
    "extract_reading_value",
    "check_thresholds",
    "run_collection"
]
