from fastapi import APIRouter, Depends
from fitpulse.schemas.sch_auth import (
    LoginRequest,
    RegisterData,
    SessionStateResponse,
    ErrorDetail
)
from fitpulse.services.svc_session import AuthSession
from fitpulse.dependencies.dep_auth import get_session

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/login", response_model=SessionStateResponse, responses={400: {"model": ErrorDetail}, 401: {"model": ErrorDetail}})
async def login(
    request: LoginRequest,
    session: AuthSession = Depends(get_session)
):
    """
    Login with email and password

    Possible errors:
    - auth_error: The backend rejected the credentials
    - network_error: The backend could not be reached
    - unexpected_response: The backend answered with an unknown payload
    """
    await session.login(request.email, request.password)
    return session.state()

@router.post("/register", response_model=SessionStateResponse, responses={400: {"model": ErrorDetail}})
async def register(
    data: RegisterData,
    session: AuthSession = Depends(get_session)
):
    """
    Start a registration. The account is only created on the backend once
    the second step is submitted to /completar-cadastro.

    Possible errors:
    - validation_error: Password and confirmation do not match
    """
    session.register(data)
    return session.state()

@router.post("/logout", response_model=SessionStateResponse)
async def logout(session: AuthSession = Depends(get_session)):
    """Logout current user and clear the persisted session"""
    session.logout()
    return session.state()

@router.get("/me", response_model=SessionStateResponse)
async def me(session: AuthSession = Depends(get_session)):
    """Current session state, including pending notifications"""
    return session.state()
