import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from fitpulse.appmain import create_app
from fitpulse.configuration.storage import MemoryStorage
from fitpulse.dependencies.dep_auth import (
    AccessDecision,
    evaluate_access,
    require_authenticated,
    require_roles,
    LOGIN_PATH,
    COMPLETE_REGISTRATION_PATH,
    ACCESS_DENIED_PATH
)
from fitpulse.models.mod_user import User, UserRole
from fitpulse.schemas.sch_auth import RegisterData
from fitpulse.services.svc_api import ApiService
from fitpulse.services.svc_session import AuthSession, SessionStore, USER_KEY, TOKEN_KEY

def make_session(user=None):
    storage = MemoryStorage()
    if user is not None:
        storage.set_item(USER_KEY, user.model_dump_json())
        storage.set_item(TOKEN_KEY, "tok")
    return AuthSession(ApiService(base_url="http://backend.fitpulse"), SessionStore(storage))

@pytest.fixture
def student():
    return User(id="7", name="Ana", email="ana@fitpulse.com.br", role=UserRole.STUDENT)

@pytest.fixture
def trainer():
    return User(id="9", name="Carlos", email="carlos@fitpulse.com.br", role=UserRole.TRAINER)

@pytest.fixture
def signup():
    return RegisterData(
        name="Ana",
        email="ana@fitpulse.com.br",
        username="ana",
        password="x",
        confirm_password="x",
        role=UserRole.STUDENT
    )

class TestEvaluateAccess:
    def test_loading(self):
        session = make_session()
        session.loading = True
        assert evaluate_access(session, "/dashboard") == AccessDecision.loading()

    def test_anonymous_redirects_to_login(self):
        assert evaluate_access(make_session(), "/dashboard") == AccessDecision.redirect(LOGIN_PATH)

    def test_anonymous_on_completion_page_redirects_to_login(self):
        assert evaluate_access(make_session(), COMPLETE_REGISTRATION_PATH) == AccessDecision.redirect(LOGIN_PATH)

    def test_pending_registration_without_user_may_complete(self, signup):
        session = make_session()
        session.set_registration_data(signup)
        assert evaluate_access(session, COMPLETE_REGISTRATION_PATH) == AccessDecision.granted()

    def test_pending_registration_is_kept_on_completion_page(self, signup):
        session = make_session()
        session.register(signup)
        assert evaluate_access(session, "/dashboard") == AccessDecision.redirect(COMPLETE_REGISTRATION_PATH)

    def test_authenticated_granted(self, student):
        assert evaluate_access(make_session(student), "/dashboard") == AccessDecision.granted()

    def test_role_allowed(self, trainer):
        session = make_session(trainer)
        assert evaluate_access(session, "/alunos", [UserRole.TRAINER]) == AccessDecision.granted()

    def test_role_denied(self, student):
        session = make_session(student)
        decision = evaluate_access(session, "/alunos", [UserRole.TRAINER])
        assert decision == AccessDecision.redirect(ACCESS_DENIED_PATH)

class TestGuardDependencies:
    @pytest.fixture
    def guarded_app(self):
        def build(session):
            app = create_app(session=session)

            @app.get("/alunos")
            async def students(user: User = Depends(require_roles(UserRole.TRAINER))):
                return {"trainer": user.id}

            @app.get("/treinos")
            async def workouts(user=Depends(require_authenticated)):
                return {"user": user.id}

            return TestClient(app)
        return build

    def test_protected_route_redirects_to_login(self, guarded_app):
        client = guarded_app(make_session())

        response = client.get("/treinos", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == LOGIN_PATH

    def test_protected_route_renders_for_user(self, guarded_app, student):
        client = guarded_app(make_session(student))

        response = client.get("/treinos")

        assert response.status_code == 200
        assert response.json() == {"user": "7"}

    def test_role_route_denies_other_role(self, guarded_app, student):
        client = guarded_app(make_session(student))

        response = client.get("/alunos", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == ACCESS_DENIED_PATH

    def test_role_route_admits_role(self, guarded_app, trainer):
        client = guarded_app(make_session(trainer))

        response = client.get("/alunos")

        assert response.json() == {"trainer": "9"}

    def test_loading_session_is_unavailable(self, guarded_app, student):
        session = make_session(student)
        session.loading = True
        client = guarded_app(session)

        response = client.get("/treinos")

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"

    def test_completion_page_with_pending_registration(self, guarded_app, signup):
        session = make_session()
        session.set_registration_data(signup)
        client = guarded_app(session)

        response = client.get(COMPLETE_REGISTRATION_PATH)

        assert response.status_code == 200
        assert response.json()["required_fields"] == ["weight", "height"]

    def test_completion_page_without_registration(self, guarded_app):
        client = guarded_app(make_session())

        response = client.get(COMPLETE_REGISTRATION_PATH, follow_redirects=False)

        assert response.headers["location"] == LOGIN_PATH
