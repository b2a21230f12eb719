import math
from fitpulse.schemas.sch_measurement import MeasurementCreate
from fitpulse.validators.val_user import ValidationError

MEASURE_FIELDS = ("weight", "height", "chest", "waist", "hips", "arms", "thighs", "neck", "shoulders")

class MeasurementValidationError(ValidationError):
    pass

class MeasurementValidator:
    @staticmethod
    def validate_required(measurement: MeasurementCreate):
        """Date and weight are mandatory for every record"""
        if not measurement.date or not measurement.weight:
            raise MeasurementValidationError("Data e peso são obrigatórios")

    @staticmethod
    def validate_positive(measurement: MeasurementCreate):
        for field in MEASURE_FIELDS:
            value = getattr(measurement, field)
            if value is not None and (not math.isfinite(value) or value <= 0):
                raise MeasurementValidationError(f"A medida '{field}' deve ser maior que zero")

    @staticmethod
    def validate_create_measurement(measurement: MeasurementCreate):
        MeasurementValidator.validate_required(measurement)
        MeasurementValidator.validate_positive(measurement)

    @staticmethod
    def validate_update_measurement(measurement: MeasurementCreate):
        MeasurementValidator.validate_positive(measurement)
