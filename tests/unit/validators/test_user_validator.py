import pytest

from fitpulse.models.mod_user import UserRole, User, TrainerProfile, StudentProfile, to_profile
from fitpulse.schemas.sch_auth import RegisterData, ProfileUpdateRequest
from fitpulse.validators.val_user import UserValidator, ValidationError

@pytest.fixture
def registration():
    return RegisterData(
        name="Ana",
        email="ana@fitpulse.com.br",
        username="ana",
        password="x",
        confirm_password="x",
        role=UserRole.STUDENT,
        weight=70,
        height=175
    )

class TestUserValidator:
    def test_weight_upper_bound(self):
        UserValidator.validate_weight(999.99)
        with pytest.raises(ValidationError):
            UserValidator.validate_weight(1000)

    def test_weight_must_be_positive(self):
        with pytest.raises(ValidationError):
            UserValidator.validate_weight(0)

    def test_height_converted_to_meters(self):
        assert UserValidator.validate_height(175) == 1.75
        assert UserValidator.validate_height(172.4) == 1.72
        assert UserValidator.validate_height(None) is None

    def test_height_upper_bound(self):
        assert UserValidator.validate_height(999) == 9.99
        with pytest.raises(ValidationError):
            UserValidator.validate_height(1000)

    def test_registration_payload(self, registration):
        payload = UserValidator.build_registration_payload(registration)

        assert payload["height"] == 1.75
        assert payload["weight"] == 70
        assert payload["role"] == "student"
        assert "confirm_password" not in payload
        assert "cref" not in payload

    def test_trainer_registration_payload(self, registration):
        trainer = registration.model_copy(update={
            "role": UserRole.TRAINER, "weight": None, "height": None, "cref": "123456-G/SP"
        })

        payload = UserValidator.build_registration_payload(trainer)

        assert payload["role"] == "personal"
        assert "height" not in payload

    def test_empty_profile_update(self):
        with pytest.raises(ValidationError):
            UserValidator.build_profile_update_payload(ProfileUpdateRequest())

    def test_role_fields(self, registration):
        UserValidator.validate_role_fields(registration)
        with pytest.raises(ValidationError):
            UserValidator.validate_role_fields(registration.model_copy(update={"height": None}))
        with pytest.raises(ValidationError):
            UserValidator.validate_role_fields(registration.model_copy(update={"role": UserRole.TRAINER}))

    @pytest.mark.parametrize("raw,expected", [
        ("11912345678", "(11) 91234-5678"),
        ("(11) 91234-5678", "(11) 91234-5678"),
        ("119", "(11) 9"),
        ("1", "(1"),
        ("", ""),
    ])
    def test_format_phone(self, raw, expected):
        assert UserValidator.format_phone(raw) == expected

    def test_password_confirmation(self, registration):
        with pytest.raises(ValidationError):
            UserValidator.validate_password_confirmation(
                registration.model_copy(update={"confirm_password": "y"})
            )

class TestProfiles:
    def test_student_profile_has_bmi(self):
        profile = to_profile(User(
            id="1", name="Ana", email="ana@fitpulse.com.br", role=UserRole.STUDENT, weight=70, height=175
        ))

        assert isinstance(profile, StudentProfile)
        assert profile.bmi == 22.9

    def test_trainer_profile(self):
        profile = to_profile(User(
            id="2", name="Carlos", email="carlos@fitpulse.com.br", role=UserRole.TRAINER, cref="123456-G/SP"
        ))

        assert isinstance(profile, TrainerProfile)
        assert profile.cref == "123456-G/SP"

class TestNonFiniteMeasures:
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_weight_rejects_non_finite(self, value):
        with pytest.raises(ValidationError):
            UserValidator.validate_weight(value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_height_rejects_non_finite(self, value):
        with pytest.raises(ValidationError):
            UserValidator.validate_height(value)

    def test_registration_with_nan_weight(self, registration):
        with pytest.raises(ValidationError):
            UserValidator.build_registration_payload(registration.model_copy(update={"weight": float("nan")}))
