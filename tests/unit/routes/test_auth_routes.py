import json
import pytest
import httpx
from fastapi.testclient import TestClient

from fitpulse.appmain import create_app
from fitpulse.configuration.storage import MemoryStorage
from fitpulse.services.svc_api import ApiService
from fitpulse.services.svc_session import AuthSession, SessionStore, USER_KEY, TOKEN_KEY

BACKEND_STUDENT = {
    "id": 7,
    "name": "Ana Souza",
    "email": "ana@fitpulse.com.br",
    "role": "student",
    "weight": 70,
    "height": 1.75
}

@pytest.fixture
def backend():
    """Route table and recorded requests of the mocked FitPulse backend"""
    return {"routes": {}, "requests": []}

@pytest.fixture
def storage():
    return MemoryStorage()

@pytest.fixture
def client(backend, storage):
    def handler(request: httpx.Request) -> httpx.Response:
        backend["requests"].append(request)
        response = backend["routes"].get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"message": "Not found"})
        return response

    api = ApiService(base_url="http://backend.fitpulse", transport=httpx.MockTransport(handler))
    session = AuthSession(api, SessionStore(storage))
    return TestClient(create_app(session=session))

@pytest.fixture
def signup_payload():
    return {
        "name": "Ana Souza",
        "email": "ana@fitpulse.com.br",
        "username": "ana",
        "password": "Segura123!",
        "confirm_password": "Segura123!",
        "role": "student"
    }

def test_login_success(client, backend, storage):
    backend["routes"][("POST", "/user/login")] = httpx.Response(200, json={"login": "tok123"})
    backend["routes"][("GET", "/user/list")] = httpx.Response(200, json=BACKEND_STUDENT)

    response = client.post("/auth/login", json={"email": "ana@fitpulse.com.br", "password": "x"})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == "7"
    assert body["user"]["height"] == 175.0
    assert body["notifications"][0]["title"] == "Login realizado com sucesso"
    assert storage.get_item(TOKEN_KEY) == "tok123"

def test_login_rejected(client, backend):
    backend["routes"][("POST", "/user/login")] = httpx.Response(401, json={"message": "Senha incorreta"})

    response = client.post("/auth/login", json={"email": "ana@fitpulse.com.br", "password": "x"})

    assert response.status_code == 401
    assert response.json()["code"] == "auth_error"
    assert response.json()["message"] == "Senha incorreta"

def test_login_backend_unreachable(client, backend):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    # Replace the whole transport handler for this test
    client.app.state.session.api.transport = httpx.MockTransport(unreachable)

    response = client.post("/auth/login", json={"email": "ana@fitpulse.com.br", "password": "x"})

    assert response.status_code == 503
    assert response.json()["code"] == "network_error"

def test_login_unknown_response_shape(client, backend):
    backend["routes"][("POST", "/user/login")] = httpx.Response(200, json={"foo": 1})

    response = client.post("/auth/login", json={"email": "ana@fitpulse.com.br", "password": "x"})

    assert response.status_code == 502
    assert response.json()["code"] == "unexpected_response"

def test_login_invalid_email(client):
    response = client.post("/auth/login", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 422

def test_register_then_complete(client, backend, storage, signup_payload):
    backend["routes"][("POST", "/user/create")] = httpx.Response(
        201, json={"user": BACKEND_STUDENT, "token": "tok-s"}
    )

    response = client.post("/auth/register", json=signup_payload)
    assert response.status_code == 200
    assert response.json()["registration_pending"] is True
    assert response.json()["user"]["is_placeholder"] is True
    assert backend["requests"] == []

    # Placeholder users are held on the completion page
    response = client.get("/dashboard", follow_redirects=False)
    assert response.headers["location"] == "/completar-cadastro"

    response = client.post("/completar-cadastro", json={"weight": 70, "height": 175, "phone": "11912345678"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["session"]["registration_pending"] is False
    assert json.loads(backend["requests"][0].content)["height"] == 1.75
    assert storage.get_item(TOKEN_KEY) == "tok-s"

    response = client.get("/dashboard")
    assert response.status_code == 200
    assert response.json()["role"] == "student"
    assert response.json()["bmi"] == 22.9

def test_register_password_mismatch(client, signup_payload):
    signup_payload["confirm_password"] = "outra"

    response = client.post("/auth/register", json=signup_payload)

    assert response.status_code == 400
    assert response.json()["message"] == "As senhas não coincidem"

def test_complete_registration_validation_error(client, backend, signup_payload):
    client.post("/auth/register", json=signup_payload)

    response = client.post("/completar-cadastro", json={"weight": 1000, "height": 175})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert backend["requests"] == []

def test_logout_clears_session(client, storage):
    storage.set_item(USER_KEY, json.dumps({
        "id": "7", "name": "Ana", "email": "ana@fitpulse.com.br", "role": "student"
    }))
    storage.set_item(TOKEN_KEY, "tok")
    client.app.state.session.hydrate()

    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert response.json()["user"] is None
    assert storage.get_item(USER_KEY) is None
    assert storage.get_item(TOKEN_KEY) is None

    response = client.get("/dashboard", follow_redirects=False)
    assert response.headers["location"] == "/login"

def test_me_drains_notifications(client):
    client.post("/auth/logout")

    first = client.get("/auth/me").json()
    second = client.get("/auth/me").json()

    assert first["notifications"][0]["title"] == "Logout realizado"
    assert second["notifications"] == []
