from datetime import date
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any, List
from fitpulse.models.mod_user import User, UserRole

# Error Schemas
class ErrorDetail(BaseModel):
    code: str
    message: str
    status_code: Optional[int] = None
    context: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

# Login and Registration Schemas
class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class RegisterData(BaseModel):
    name: str
    email: EmailStr
    username: str
    password: str
    confirm_password: str
    phone: str = ""
    date_of_birth: Optional[date] = None
    gender: str = ""
    role: UserRole = UserRole.STUDENT
    status: str = "active"
    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # cm
    cref: Optional[str] = None

class AdditionalUserData(BaseModel):
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # cm
    cref: Optional[str] = None
    avatar: Optional[str] = None
    status: Optional[str] = None

# Profile Schemas
class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # cm
    cref: Optional[str] = None
    status: Optional[str] = None

class AvatarUpload(BaseModel):
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

class AvatarResponse(BaseModel):
    avatar: str

class TrainerDetailsRequest(BaseModel):
    cref: str = Field(min_length=1)

# Session Schemas
class Notification(BaseModel):
    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"

class SessionStateResponse(BaseModel):
    user: Optional[User] = None
    loading: bool = False
    registration_pending: bool = False
    notifications: List[Notification] = []

class PendingRegistrationResponse(BaseModel):
    name: str
    email: EmailStr
    role: UserRole
    required_fields: List[str]

class CompleteRegistrationResponse(BaseModel):
    success: bool
    session: SessionStateResponse
