import json
import uuid
from typing import List, Optional
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError
from fitpulse.configuration.storage import StorageBackend
from fitpulse.configuration.monitor import log_event, log_exception, log_metric, log_warning, start_span
from fitpulse.models.mod_measurement import MeasurementRecord, MeasurementSummary
from fitpulse.models.mod_user import body_mass_index
from fitpulse.schemas.sch_measurement import MeasurementCreate, MeasurementUpdate
from fitpulse.validators.val_measurement import MeasurementValidator

MEASUREMENTS_KEY = "fitpulse-measurements-{user_id}"

_records_adapter = TypeAdapter(List[MeasurementRecord])

class MeasurementService:
    """Body measurement history, kept per user in local storage"""

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    def _load(self, user_id: str) -> List[MeasurementRecord]:
        key = MEASUREMENTS_KEY.format(user_id=user_id)
        raw = self.storage.get_item(key)
        if raw is None:
            return []
        try:
            return _records_adapter.validate_json(raw)
        except SchemaError as e:
            log_warning("Discarding malformed measurement history", {"user_id": user_id, "error": str(e)})
            self.storage.remove_item(key)
            return []

    def _save(self, user_id: str, records: List[MeasurementRecord]) -> None:
        key = MEASUREMENTS_KEY.format(user_id=user_id)
        self.storage.set_item(key, json.dumps(_records_adapter.dump_python(records, mode="json")))

    def list_records(self, user_id: str) -> List[MeasurementRecord]:
        """All records for a user, newest first"""
        return sorted(self._load(user_id), key=lambda record: record.date, reverse=True)

    def add_record(self, user_id: str, measurement: MeasurementCreate) -> MeasurementRecord:
        try:
            with start_span("add_measurement", attributes={"user_id": user_id}):
                MeasurementValidator.validate_create_measurement(measurement)

                record = MeasurementRecord(id=str(uuid.uuid4()), **measurement.model_dump())
                records = self._load(user_id)
                records.append(record)
                self._save(user_id, records)

                log_event("Measurement added", {"user_id": user_id, "measurement_id": record.id})
                return record
        except Exception as e:
            log_exception(e, {"operation": "add_measurement", "user_id": user_id})
            raise

    def update_record(self, user_id: str, measurement_id: str, measurement: MeasurementUpdate) -> Optional[MeasurementRecord]:
        try:
            with start_span("update_measurement", attributes={"user_id": user_id, "measurement_id": measurement_id}):
                MeasurementValidator.validate_update_measurement(measurement)

                records = self._load(user_id)
                for index, record in enumerate(records):
                    if record.id == measurement_id:
                        updated = record.model_copy(update=measurement.model_dump(exclude_none=True))
                        records[index] = updated
                        self._save(user_id, records)
                        log_event("Measurement updated", {"user_id": user_id, "measurement_id": measurement_id})
                        return updated

                log_event("Measurement not found", {"user_id": user_id, "measurement_id": measurement_id})
                return None
        except Exception as e:
            log_exception(e, {"operation": "update_measurement", "user_id": user_id})
            raise

    def delete_record(self, user_id: str, measurement_id: str) -> bool:
        try:
            with start_span("delete_measurement", attributes={"user_id": user_id, "measurement_id": measurement_id}):
                records = self._load(user_id)
                remaining = [record for record in records if record.id != measurement_id]
                if len(remaining) == len(records):
                    log_event("Measurement not found", {"user_id": user_id, "measurement_id": measurement_id})
                    return False
                self._save(user_id, remaining)
                log_event("Measurement deleted", {"user_id": user_id, "measurement_id": measurement_id})
                return True
        except Exception as e:
            log_exception(e, {"operation": "delete_measurement", "user_id": user_id})
            raise

    def summarize(self, user_id: str, height: Optional[float] = None) -> MeasurementSummary:
        """
        Progress overview for a user

        Args:
            user_id: Owner of the records
            height: Profile height (cm), used for BMI when the latest record has none

        Returns:
            Records newest first, the latest record, weight change since the
            first record, and the BMI of the latest record
        """
        records = self.list_records(user_id)
        if not records:
            return MeasurementSummary(records=[])

        latest, first = records[0], records[-1]
        weight_change = round(latest.weight - first.weight, 2)
        log_metric("weight_change", weight_change, {"user_id": user_id})
        return MeasurementSummary(
            records=records,
            latest=latest,
            weight_change=weight_change,
            bmi=body_mass_index(latest.weight, latest.height or height)
        )
