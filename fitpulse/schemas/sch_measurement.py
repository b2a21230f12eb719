import datetime
from pydantic import BaseModel
from typing import Optional

class MeasurementCreate(BaseModel):
    date: Optional[datetime.date] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    chest: Optional[float] = None
    waist: Optional[float] = None
    hips: Optional[float] = None
    arms: Optional[float] = None
    thighs: Optional[float] = None
    neck: Optional[float] = None
    shoulders: Optional[float] = None

class MeasurementUpdate(MeasurementCreate):
    pass
