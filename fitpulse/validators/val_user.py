import math
import re
from typing import Optional, Dict, Any
from fitpulse.models.mod_user import UserRole, BACKEND_ROLES
from fitpulse.schemas.sch_auth import RegisterData, ProfileUpdateRequest
from fitpulse.services.svc_errors import ApiError

MAX_WEIGHT = 999.99  # kg
MAX_HEIGHT_METERS = 9.99

class ValidationError(ApiError):
    """Client-side validation failure, raised before any request is sent"""
    code = "validation_error"

class UserValidator:
    @staticmethod
    def height_to_meters(height_cm: float) -> float:
        return round(height_cm / 100, 2)

    @staticmethod
    def validate_weight(weight: Optional[float]):
        """Validate the weight sent to the backend (kg)"""
        if weight is None:
            return
        if not math.isfinite(weight):
            raise ValidationError("O peso informado é inválido")
        if weight <= 0:
            raise ValidationError("O peso deve ser maior que zero")
        if weight > MAX_WEIGHT:
            raise ValidationError(f"O peso deve ser no máximo {MAX_WEIGHT} kg")

    @staticmethod
    def validate_height(height_cm: Optional[float]) -> Optional[float]:
        """Validate a height given in centimeters and return it in meters"""
        if height_cm is None:
            return None
        if not math.isfinite(height_cm):
            raise ValidationError("A altura informada é inválida")
        if height_cm <= 0:
            raise ValidationError("A altura deve ser maior que zero")
        height_m = UserValidator.height_to_meters(height_cm)
        if height_m > MAX_HEIGHT_METERS:
            raise ValidationError(f"A altura deve ser no máximo {MAX_HEIGHT_METERS} m")
        return height_m

    @staticmethod
    def validate_password_confirmation(data: RegisterData):
        if data.password != data.confirm_password:
            raise ValidationError("As senhas não coincidem")

    @staticmethod
    def required_fields(role: UserRole) -> list[str]:
        """Profile fields that become mandatory for a role"""
        if role == UserRole.STUDENT:
            return ["weight", "height"]
        return ["cref"]

    @staticmethod
    def validate_role_fields(data: RegisterData):
        """Validate the fields a completed registration must carry for its role"""
        missing = [
            field for field in UserValidator.required_fields(data.role)
            if getattr(data, field) in (None, "")
        ]
        if missing:
            raise ValidationError(
                f"Campos obrigatórios para {data.role.value}: {', '.join(missing)}"
            )

    @staticmethod
    def format_phone(value: Optional[str]) -> Optional[str]:
        """Format a Brazilian mobile number as (DD) DDDDD-DDDD, progressively for partial input"""
        if value is None:
            return None
        digits = re.sub(r"\D", "", value)[:11]
        if not digits:
            return value
        formatted = f"({digits[:2]}"
        if len(digits) > 2:
            formatted += f") {digits[2:7]}"
            if len(digits) > 7:
                formatted += f"-{digits[7:11]}"
        return formatted

    @staticmethod
    def build_registration_payload(data: RegisterData) -> Dict[str, Any]:
        """Validate a registration and translate it to the backend contract"""
        UserValidator.validate_weight(data.weight)
        height_m = UserValidator.validate_height(data.height)

        payload = data.model_dump(mode="json", exclude={"confirm_password"}, exclude_none=True)
        payload["role"] = BACKEND_ROLES[data.role]
        if height_m is not None:
            payload["height"] = height_m
        return payload

    @staticmethod
    def build_profile_update_payload(data: ProfileUpdateRequest) -> Dict[str, Any]:
        """Validate a partial profile update and translate it to the backend contract"""
        UserValidator.validate_weight(data.weight)
        height_m = UserValidator.validate_height(data.height)

        payload = data.model_dump(mode="json", exclude_none=True)
        if height_m is not None:
            payload["height"] = height_m
        if not payload:
            raise ValidationError("Nenhum campo informado para atualização")
        return payload
