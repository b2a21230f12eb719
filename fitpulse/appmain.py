from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fitpulse.routers import rou_auth, rou_pages, rou_profile, rou_objective, rou_measurement
from fitpulse.configuration.monitor import instrument_fastapi, log_event
from fitpulse.configuration.storage import get_storage
from fitpulse.dependencies.dep_auth import GuardRedirect
from fitpulse.services.svc_api import ApiService
from fitpulse.services.svc_errors import ApiError, AuthError, NetworkError, ResponseShapeError
from fitpulse.services.svc_measurement import MeasurementService
from fitpulse.services.svc_session import AuthSession, SessionStore
from fitpulse.validators.val_user import ValidationError

def error_status(error: ApiError) -> int:
    """HTTP status used to report a client error to the browser"""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NetworkError):
        return 503
    if isinstance(error, ResponseShapeError):
        return 502
    if error.status_code and 400 <= error.status_code < 500:
        return error.status_code
    if isinstance(error, AuthError) and error.status_code is None:
        return 401
    return 502

def create_app(session: Optional[AuthSession] = None, measurements: Optional[MeasurementService] = None) -> FastAPI:
    """
    Build the FitPulse web application
    Args:
        session: Auth session to serve; built from configuration when omitted
        measurements: Measurement service; shares the session's storage when omitted
    Returns:
        The configured FastAPI application
    """
    if session is None:
        session = AuthSession(ApiService(), SessionStore(get_storage()))
    if measurements is None:
        measurements = MeasurementService(session.store.storage)

    app = FastAPI(
        title="FitPulse",
        description="FitPulse web client for personal trainers and students",
        version="1.0.0"
    )
    app.state.session = session
    app.state.measurements = measurements

    # Include all routers
    app.include_router(rou_auth.router)  # Auth routes should typically be first
    app.include_router(rou_pages.router)
    app.include_router(rou_profile.router)
    app.include_router(rou_objective.router)
    app.include_router(rou_measurement.router)

    @app.exception_handler(GuardRedirect)
    async def guard_redirect_handler(request: Request, exc: GuardRedirect):
        log_event("Guard redirect", {"path": request.url.path, "location": exc.location})
        return RedirectResponse(url=exc.location, status_code=307)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(
            status_code=error_status(exc),
            content=exc.to_detail(context=request.url.path)
        )

    # Instrument app with Azure Monitor
    instrument_fastapi(app)
    return app

app = create_app()

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
