from typing import Optional, Union
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from fitpulse.models.mod_user import User, TrainerProfile, StudentProfile, to_profile
from fitpulse.schemas.sch_auth import (
    AdditionalUserData,
    CompleteRegistrationResponse,
    PendingRegistrationResponse,
    ErrorDetail
)
from fitpulse.services.svc_session import AuthSession
from fitpulse.validators.val_user import UserValidator
from fitpulse.dependencies.dep_auth import (
    get_session,
    get_current_user,
    require_authenticated,
    LOGIN_PATH,
    COMPLETE_REGISTRATION_PATH,
    ACCESS_DENIED_PATH
)

router = APIRouter(tags=["Pages"])

@router.get(LOGIN_PATH)
async def login_page():
    """Landing page for visitors without a session"""
    return {"message": "Faça login para continuar"}

@router.get(ACCESS_DENIED_PATH)
async def access_denied_page():
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"message": "Você não tem permissão para acessar esta página"}
    )

@router.get(COMPLETE_REGISTRATION_PATH, response_model=Optional[PendingRegistrationResponse])
async def pending_registration(
    user: Optional[User] = Depends(require_authenticated),
    session: AuthSession = Depends(get_session)
):
    """Pending registration data and the fields the second step must provide"""
    data = session.registration_data
    if data is None:
        return None
    return PendingRegistrationResponse(
        name=data.name,
        email=data.email,
        role=data.role,
        required_fields=UserValidator.required_fields(data.role)
    )

@router.post(COMPLETE_REGISTRATION_PATH, response_model=CompleteRegistrationResponse, responses={400: {"model": ErrorDetail}})
async def complete_registration(
    additional: AdditionalUserData,
    user: Optional[User] = Depends(require_authenticated),
    session: AuthSession = Depends(get_session)
):
    """
    Submit the second registration step and create the account

    Possible errors:
    - validation_error: Missing role fields, weight or height out of bounds
    - auth_error: The backend rejected the registration
    """
    success = await session.complete_registration(additional)
    return CompleteRegistrationResponse(success=success, session=session.state())

@router.get("/dashboard", response_model=Union[TrainerProfile, StudentProfile])
async def dashboard(user: User = Depends(get_current_user)):
    """Role-specific landing page for logged-in users"""
    return to_profile(user)
