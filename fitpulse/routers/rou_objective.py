from typing import List
from fastapi import APIRouter, Depends
from fitpulse.models.mod_user import User, Objective
from fitpulse.schemas.sch_auth import ErrorDetail
from fitpulse.schemas.sch_objective import ObjectiveCreate, ObjectiveLinkRequest, ObjectivesResponse
from fitpulse.services.svc_session import AuthSession
from fitpulse.dependencies.dep_auth import get_session, get_current_user

router = APIRouter(prefix="/objetivos", tags=["Objectives"])

@router.get("", response_model=ObjectivesResponse)
async def list_objectives(
    user: User = Depends(get_current_user),
    session: AuthSession = Depends(get_session)
):
    """All objectives, plus the ones linked to the current user"""
    all_objectives, mine = await session.list_objectives()
    return ObjectivesResponse(all=all_objectives, mine=mine)

@router.post("", response_model=Objective, responses={400: {"model": ErrorDetail}})
async def create_objective(
    data: ObjectiveCreate,
    user: User = Depends(get_current_user),
    session: AuthSession = Depends(get_session)
):
    return await session.create_objective(data.name.strip())

@router.post("/vincular", response_model=List[Objective], responses={400: {"model": ErrorDetail}})
async def link_objectives(
    data: ObjectiveLinkRequest,
    user: User = Depends(get_current_user),
    session: AuthSession = Depends(get_session)
):
    """Link objectives to the current user; returns the user's objectives afterwards"""
    return await session.link_objectives(data.objective_ids)
