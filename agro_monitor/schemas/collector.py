from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union

class SensorFetchSuccess(BaseModel):
    sensor_id: int = Field(alias="sensorId")
    success: Literal[True] = True
    value: Optional[float] = None

    class Config:
        populate_by_name = True

class SensorFetchFailure(BaseModel):
    sensor_id: int = Field(alias="sensorId")
    success: Literal[False] = False
    error: str

    class Config:
        populate_by_name = True

SensorFetchResult = Union[SensorFetchSuccess, SensorFetchFailure]

class CollectionReport(BaseModel):
    """Outcome of one collector run; success stays True when single sensors fail"""
    success: bool = True
    results: List[SensorFetchResult] = Field(default_factory=list)
