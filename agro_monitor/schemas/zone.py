from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class ZoneBase(BaseModel):
    company_id: int
    name: str
    description: Optional[str] = None

class ZoneCreate(ZoneBase):
    pass

class ZoneResponse(ZoneBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
