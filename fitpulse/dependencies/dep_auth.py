from typing import Optional, Iterable
from fastapi import Depends, HTTPException, Request, status
from fitpulse.models.mod_user import User, UserRole
from fitpulse.services.svc_session import AuthSession
from fitpulse.services.svc_measurement import MeasurementService

LOGIN_PATH = "/login"
COMPLETE_REGISTRATION_PATH = "/completar-cadastro"
ACCESS_DENIED_PATH = "/acesso-negado"

class GuardRedirect(Exception):
    """Raised by a guard to send the visitor elsewhere; answered with a redirect"""

    def __init__(self, location: str):
        self.location = location
        super().__init__(location)

class AccessDecision:
    LOADING = "loading"
    GRANTED = "granted"
    REDIRECT = "redirect"

    def __init__(self, outcome: str, location: Optional[str] = None):
        self.outcome = outcome
        self.location = location

    def __eq__(self, other):
        return (
            isinstance(other, AccessDecision)
            and self.outcome == other.outcome
            and self.location == other.location
        )

    def __repr__(self):
        return f"AccessDecision({self.outcome!r}, {self.location!r})"

    @classmethod
    def loading(cls):
        return cls(cls.LOADING)

    @classmethod
    def granted(cls):
        return cls(cls.GRANTED)

    @classmethod
    def redirect(cls, location: str):
        return cls(cls.REDIRECT, location)

def evaluate_access(session: AuthSession, path: str, roles: Optional[Iterable[UserRole]] = None) -> AccessDecision:
    """
    Decide whether a visitor may see a protected page

    Args:
        session: Current auth session
        path: Requested path
        roles: Allowed roles; None admits any authenticated user

    Returns:
        loading, granted, or a redirect to login / registration / access denied
    """
    if session.loading:
        return AccessDecision.loading()

    # A pending registration may finish even without an authenticated user
    if path == COMPLETE_REGISTRATION_PATH and session.registration_pending:
        return AccessDecision.granted()

    if session.user is None:
        return AccessDecision.redirect(LOGIN_PATH)

    if session.registration_pending:
        return AccessDecision.redirect(COMPLETE_REGISTRATION_PATH)

    if roles is not None and session.user.role not in set(roles):
        return AccessDecision.redirect(ACCESS_DENIED_PATH)

    return AccessDecision.granted()

def get_session(request: Request) -> AuthSession:
    """Dependency that provides the application's auth session"""
    return request.app.state.session

def get_measurements(request: Request) -> MeasurementService:
    return request.app.state.measurements

def _enforce(decision: AccessDecision, session: AuthSession) -> Optional[User]:
    if decision.outcome == AccessDecision.LOADING:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Carregando...",
            headers={"Retry-After": "1"},
        )
    if decision.outcome == AccessDecision.REDIRECT:
        raise GuardRedirect(decision.location)
    return session.user

def require_authenticated(request: Request, session: AuthSession = Depends(get_session)) -> Optional[User]:
    """
    Dependency for pages that require a logged-in user.
    Returns the current user (None only on the registration-completion page).
    """
    return _enforce(evaluate_access(session, request.url.path), session)

def require_roles(*roles: UserRole):
    """Dependency factory for pages restricted to some roles"""
    allowed = frozenset(roles)

    def dependency(request: Request, session: AuthSession = Depends(get_session)) -> User:
        return _enforce(evaluate_access(session, request.url.path, allowed), session)

    return dependency

def get_current_user(user: Optional[User] = Depends(require_authenticated)) -> User:
    """Dependency for endpoints that need a real user, not a pending registration"""
    if user is None:
        raise GuardRedirect(LOGIN_PATH)
    return user

def get_current_trainer(user: User = Depends(require_roles(UserRole.TRAINER))) -> User:
    """Dependency for endpoints that require trainer access"""
    return user

def get_current_student(user: User = Depends(require_roles(UserRole.STUDENT))) -> User:
    """Dependency for endpoints that require student access"""
    return user
