from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from agro_monitor.database import get_db
from agro_monitor.models.company import Company
from agro_monitor.models.sensor import Sensor
from agro_monitor.models.zone import Zone
from agro_monitor.schemas.sensor import SensorResponse
from agro_monitor.schemas.zone import ZoneResponse, ZoneCreate
from typing import List, Optional

router = APIRouter(prefix="/api/v1/zones", tags=["zones"])

@router.get("/", response_model=List[ZoneResponse])
async def get_zones(company_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Get all zones, optionally for one company"""
    query = db.query(Zone)
    if company_id is not None:
        query = query.filter(Zone.company_id == company_id)
    return query.order_by(Zone.id).all()

@router.get("/{zone_id}", response_model=ZoneResponse)
async def get_zone(zone_id: int, db: Session = Depends(get_db)):
    """Get zone by ID"""
    zone = db.query(Zone).filter(Zone.id == zone_id).first()
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")
    return zone

@router.get("/{zone_id}/sensors", response_model=List[SensorResponse])
async def get_zone_sensors(zone_id: int, db: Session = Depends(get_db)):
    """Get all sensors of a zone"""
    zone = db.query(Zone).filter(Zone.id == zone_id).first()
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")
    return db.query(Sensor).filter(Sensor.zone_id == zone_id).order_by(Sensor.id).all()

@router.post("/", response_model=ZoneResponse)
async def create_zone(zone: ZoneCreate, db: Session = Depends(get_db)):
    """Create new zone"""
    company = db.query(Company).filter(Company.id == zone.company_id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    db_zone = Zone(**zone.model_dump())
    db.add(db_zone)
    db.commit()
    db.refresh(db_zone)
    return db_zone
