from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Float, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from agro_monitor.database import Base

class Sensor(Base):
    __tablename__ = "monitoring_sensors"
    
    id = Column(Integer, primary_key=True, index=True)
    zone_id = Column(Integer, ForeignKey("monitoring_zones.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    sensor_type = Column(String, nullable=False)  # "moisture", "temperature", "wind", ...
    serial_number = Column(String)
    status = Column(String, default="online")  # "online", "offline"
    battery_level = Column(Integer)
    calibration_date = Column(Date)
    # Remote API config (apiUrl, apiKey, apiMethod) plus the latest value/timestamp
    last_reading = Column(JSON)
    threshold_min = Column(Float)
    threshold_max = Column(Float)
    alert_enabled = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    zone = relationship("Zone", back_populates="sensors")

    @property
    def api_config(self):
        return self.last_reading if isinstance(self.last_reading, dict) else {}

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_config.get("apiKey"))
