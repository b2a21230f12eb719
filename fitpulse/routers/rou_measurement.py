from fastapi import APIRouter, Depends, HTTPException
from fitpulse.models.mod_user import User
from fitpulse.models.mod_measurement import MeasurementRecord, MeasurementSummary
from fitpulse.schemas.sch_auth import ErrorDetail
from fitpulse.schemas.sch_measurement import MeasurementCreate, MeasurementUpdate
from fitpulse.services.svc_measurement import MeasurementService
from fitpulse.dependencies.dep_auth import get_current_student, get_measurements

router = APIRouter(prefix="/progresso", tags=["Progress"])

@router.get("", response_model=MeasurementSummary)
async def get_progress(
    student: User = Depends(get_current_student),
    measurements: MeasurementService = Depends(get_measurements)
):
    """Measurement history and progress summary for the current student"""
    return measurements.summarize(student.id, height=student.height)

@router.post("/medidas", response_model=MeasurementRecord, responses={400: {"model": ErrorDetail}})
async def add_measurement(
    measurement: MeasurementCreate,
    student: User = Depends(get_current_student),
    measurements: MeasurementService = Depends(get_measurements)
):
    """
    Record a new set of measurements

    Possible errors:
    - validation_error: Missing date or weight, or a non-positive measure
    """
    return measurements.add_record(student.id, measurement)

@router.put("/medidas/{measurement_id}", response_model=MeasurementRecord, responses={400: {"model": ErrorDetail}})
async def update_measurement(
    measurement_id: str,
    measurement: MeasurementUpdate,
    student: User = Depends(get_current_student),
    measurements: MeasurementService = Depends(get_measurements)
):
    record = measurements.update_record(student.id, measurement_id, measurement)
    if not record:
        raise HTTPException(status_code=404, detail="Measurement not found")
    return record

@router.delete("/medidas/{measurement_id}")
async def delete_measurement(
    measurement_id: str,
    student: User = Depends(get_current_student),
    measurements: MeasurementService = Depends(get_measurements)
):
    if not measurements.delete_record(student.id, measurement_id):
        raise HTTPException(status_code=404, detail="Measurement not found")
    return {"message": "Measurement deleted successfully"}
