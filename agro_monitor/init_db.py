"""
Database initialization script
Creates a demo company with users, monitoring zones and sensors
"""
import logging

from agro_monitor.database import SessionLocal, engine
from agro_monitor.models import Base
from agro_monitor.models.company import Company
from agro_monitor.models.profile import Profile
from agro_monitor.models.zone import Zone
from agro_monitor.models.sensor import Sensor

logger = logging.getLogger(__name__)

def init_database():
    """Initialize database with a demo company when it is empty"""
    
    Base.metadata.create_all(bind=engine)
    
    db = SessionLocal()
    try:
        existing_companies = db.query(Company).count()
        if existing_companies > 0:
            logger.info("Database already initialized")
            return
        
        company = Company(name="ООО «Агро Демо»", email="info@agro-demo.example")
        db.add(company)
        db.flush()  # Get the ID
        
        profiles = [
            Profile(company_id=company.id, first_name="Иван", last_name="Петров", email="agronomist@agro-demo.example"),
            Profile(company_id=company.id, first_name="Мария", last_name="Смирнова", email="manager@agro-demo.example"),
        ]
        for profile in profiles:
            db.add(profile)
        
        field_zone = Zone(company_id=company.id, name="Поле №1", description="Озимая пшеница")
        greenhouse_zone = Zone(company_id=company.id, name="Теплица", description="Томаты")
        db.add(field_zone)
        db.add(greenhouse_zone)
        db.flush()
        
        # No apiUrl configured: the collector skips them until settings are saved
        sensors = [
            Sensor(zone_id=field_zone.id, name="Датчик влажности #1", sensor_type="moisture",
                   serial_number="SN001", battery_level=85, threshold_min=40, threshold_max=70),
            Sensor(zone_id=field_zone.id, name="Датчик температуры #1", sensor_type="temperature",
                   serial_number="SN002", battery_level=92, threshold_min=15, threshold_max=25),
            Sensor(zone_id=greenhouse_zone.id, name="Датчик влажности #2", sensor_type="moisture",
                   serial_number="SN005", battery_level=91, threshold_min=40, threshold_max=70),
            Sensor(zone_id=greenhouse_zone.id, name="Датчик ветра #1", sensor_type="wind",
                   serial_number="SN013", battery_level=77),
        ]
        for sensor in sensors:
            db.add(sensor)
        
        db.commit()
        logger.info("Database initialized successfully!")
        logger.info(f"Created company: {company.name}")
        logger.info(f"Created zones: {field_zone.name}, {greenhouse_zone.name}")
        logger.info(f"Created {len(sensors)} sensors for {len(profiles)} users")
        
    except Exception as e:
        db.rollback()
        logger.error(f"Error initializing database: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    init_database()
