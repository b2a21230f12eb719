from enum import Enum
from datetime import date, datetime, timezone
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Union, Literal, Annotated

class UserRole(str, Enum):
    TRAINER = "trainer"
    STUDENT = "student"

# Vocabulary used by the FitPulse backend
BACKEND_ROLES = {
    UserRole.TRAINER: "personal",
    UserRole.STUDENT: "student",
}
ROLES_FROM_BACKEND = {value: role for role, value in BACKEND_ROLES.items()}

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class User(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: UserRole = UserRole.STUDENT
    username: Optional[str] = None
    status: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # cm
    avatar: Optional[str] = None
    cref: Optional[str] = None
    token: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    is_placeholder: bool = False  # synthesized locally, not yet confirmed by the backend

class TrainerProfile(BaseModel):
    role: Literal[UserRole.TRAINER] = UserRole.TRAINER
    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar: Optional[str] = None
    cref: Optional[str] = None

class StudentProfile(BaseModel):
    role: Literal[UserRole.STUDENT] = UserRole.STUDENT
    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    bmi: Optional[float] = None

UserProfile = Annotated[Union[TrainerProfile, StudentProfile], Field(discriminator="role")]

def body_mass_index(weight: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """BMI rounded to one decimal, or None when either measure is missing."""
    if not weight or not height_cm:
        return None
    height_m = height_cm / 100
    return round(weight / (height_m * height_m), 1)

def to_profile(user: User) -> Union[TrainerProfile, StudentProfile]:
    """Project a user onto the profile variant of its role."""
    common = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "gender": user.gender,
        "date_of_birth": user.date_of_birth,
        "avatar": user.avatar,
    }
    if user.role == UserRole.TRAINER:
        return TrainerProfile(cref=user.cref, **common)
    if user.role == UserRole.STUDENT:
        return StudentProfile(
            weight=user.weight,
            height=user.height,
            bmi=body_mass_index(user.weight, user.height),
            **common
        )
    raise ValueError(f"Unsupported role {user.role}")

class Objective(BaseModel):
    id: int
    name: str
