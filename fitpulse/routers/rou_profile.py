from typing import Union
from fastapi import APIRouter, Depends, File, UploadFile
from fitpulse.models.mod_user import User, TrainerProfile, StudentProfile, to_profile
from fitpulse.schemas.sch_auth import (
    ProfileUpdateRequest,
    AvatarUpload,
    AvatarResponse,
    TrainerDetailsRequest,
    ErrorDetail
)
from fitpulse.services.svc_session import AuthSession
from fitpulse.dependencies.dep_auth import get_session, get_current_user, get_current_trainer

router = APIRouter(prefix="/perfil", tags=["Profile"])

ProfileResponse = Union[TrainerProfile, StudentProfile]

@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    session: AuthSession = Depends(get_session)
):
    """Fetch the canonical profile from the backend and refresh the session"""
    return to_profile(await session.refresh_profile())

@router.put("", response_model=ProfileResponse, responses={400: {"model": ErrorDetail}})
async def update_profile(
    data: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    session: AuthSession = Depends(get_session)
):
    """
    Update profile fields. Height is given in centimeters.

    Possible errors:
    - validation_error: Weight or height out of bounds, or nothing to update
    """
    return to_profile(await session.update_profile(data))

@router.put("/avatar", response_model=AvatarResponse, responses={400: {"model": ErrorDetail}})
async def upload_avatar(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    session: AuthSession = Depends(get_session)
):
    """Upload a new profile picture"""
    upload = AvatarUpload(
        filename=file.filename or "avatar",
        content=await file.read(),
        content_type=file.content_type or "application/octet-stream"
    )
    return AvatarResponse(avatar=await session.upload_avatar(upload))

@router.post("/cref", response_model=TrainerProfile, responses={400: {"model": ErrorDetail}})
async def submit_trainer_details(
    data: TrainerDetailsRequest,
    trainer: User = Depends(get_current_trainer),
    session: AuthSession = Depends(get_session)
):
    """Submit the trainer's CREF registration number"""
    return to_profile(await session.submit_trainer_details(data.cref))
