import datetime
from pydantic import BaseModel
from typing import Optional

class MeasurementRecord(BaseModel):
    id: str
    date: datetime.date
    weight: float  # kg
    height: Optional[float] = None  # cm
    chest: Optional[float] = None
    waist: Optional[float] = None
    hips: Optional[float] = None
    arms: Optional[float] = None
    thighs: Optional[float] = None
    neck: Optional[float] = None
    shoulders: Optional[float] = None

class MeasurementSummary(BaseModel):
    records: list[MeasurementRecord]
    latest: Optional[MeasurementRecord] = None
    weight_change: Optional[float] = None
    bmi: Optional[float] = None
