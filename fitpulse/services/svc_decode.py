"""Response decoders for the FitPulse backend.

One decoder per endpoint. Each accepts only the shapes the backend is known
to send and raises ResponseShapeError on anything else.
"""
import json
from typing import Optional, Dict, Any, List
import httpx
from jose import jwt, JWTError
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from pydantic import ValidationError as SchemaError
from datetime import date, datetime
from fitpulse.models.mod_user import User, UserRole, Objective, ROLES_FROM_BACKEND, utcnow
from fitpulse.services.svc_errors import ResponseShapeError

TOKEN_KEYS = ("token", "login", "access_token")
PLACEHOLDER_USER_ID = "pending"

class BackendUserRecord(BaseModel):
    """User record as the backend serializes it (height in meters, backend role vocabulary)"""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    email: str
    role: str
    username: Optional[str] = None
    status: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = Field(default=None, validation_alias=AliasChoices("date_of_birth", "dateOfBirth"))
    weight: Optional[float] = None
    height: Optional[float] = None
    avatar: Optional[str] = Field(default=None, validation_alias=AliasChoices("avatar", "avatar_url"))
    cref: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))

def read_json(response: httpx.Response) -> Any:
    """Parsed JSON body, or None when the body is empty or not JSON"""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None

def extract_error_message(response: httpx.Response, default: str) -> str:
    """Best-effort error message: JSON `message`, then raw text, then the default"""
    body = read_json(response)
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    text = response.text.strip() if response.content else ""
    return text or default

def extract_token(payload: Dict[str, Any]) -> Optional[str]:
    for key in TOKEN_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None

def decode_user_record(payload: Any, token: Optional[str] = None) -> User:
    """
    Decode a backend user record into a User

    Args:
        payload: The JSON user record
        token: Bearer token to attach to the user, if known

    Returns:
        The user in client vocabulary (role mapped, height in centimeters)
    """
    if not isinstance(payload, dict):
        raise ResponseShapeError("Registro de usuário inválido na resposta do servidor")
    try:
        record = BackendUserRecord.model_validate(payload)
    except SchemaError as e:
        raise ResponseShapeError(
            "Registro de usuário inválido na resposta do servidor",
            details={"errors": e.errors(include_url=False, include_input=False)}
        ) from e

    role = ROLES_FROM_BACKEND.get(record.role)
    if role is None:
        raise ResponseShapeError(f"Papel de usuário desconhecido: {record.role}")

    try:
        return User(
            id=record.id,
            name=record.name,
            email=record.email,
            role=role,
            username=record.username,
            status=record.status,
            phone=record.phone,
            gender=record.gender,
            date_of_birth=record.date_of_birth,
            weight=record.weight,
            height=round(record.height * 100, 1) if record.height is not None else None,
            avatar=record.avatar,
            cref=record.cref,
            token=token,
            created_at=record.created_at or utcnow(),
        )
    except SchemaError as e:
        raise ResponseShapeError(
            "Registro de usuário inválido na resposta do servidor",
            details={"errors": e.errors(include_url=False, include_input=False)}
        ) from e

def token_claims(token: str) -> Dict[str, Any]:
    """Unverified JWT claims, or an empty dict for opaque tokens"""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return {}
    return claims if isinstance(claims, dict) else {}

def claim_text(claims: Dict[str, Any], key: str) -> Optional[str]:
    """A claim as text when it is a string or an integer, else None"""
    value = claims.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value).strip() or None

def placeholder_user(token: str, email: str, name: Optional[str] = None,
                     role: Optional[UserRole] = None) -> User:
    """Synthesize a user for a bare-token response; role defaults to student"""
    claims = token_claims(token)
    if role is None:
        claimed_role = claim_text(claims, "role")
        role = ROLES_FROM_BACKEND.get(claimed_role)
        if role is None and claimed_role in (r.value for r in UserRole):
            role = UserRole(claimed_role)
    return User(
        id=claim_text(claims, "sub") or PLACEHOLDER_USER_ID,
        name=name or claim_text(claims, "name") or email.split("@")[0],
        email=email,
        role=role or UserRole.STUDENT,
        token=token,
        is_placeholder=True,
    )

def decode_auth_response(response: httpx.Response, email: str, name: Optional[str] = None,
                         role: Optional[UserRole] = None) -> User:
    """
    Decode a login/registration response

    Accepts a `user` envelope, a flat user record, or a bare token
    (JSON `login`/`token`/`access_token`, or a plain text body).
    """
    body = read_json(response)

    if body is None:
        token = response.text.strip() if response.content else ""
        if not token:
            raise ResponseShapeError("Resposta de autenticação vazia")
        return placeholder_user(token, email, name, role)

    if isinstance(body, str) and body.strip():
        return placeholder_user(body.strip(), email, name, role)

    if not isinstance(body, dict):
        raise ResponseShapeError("Formato de resposta de autenticação não reconhecido")

    token = extract_token(body)
    if isinstance(body.get("user"), dict):
        return decode_user_record(body["user"], token=token)
    if "id" in body and "email" in body:
        return decode_user_record(body, token=token)
    if token:
        return placeholder_user(token, email, name, role)

    raise ResponseShapeError(
        "Formato de resposta de autenticação não reconhecido",
        details={"keys": sorted(body.keys())}
    )

def decode_objective(payload: Any) -> Objective:
    if not isinstance(payload, dict):
        raise ResponseShapeError("Objetivo inválido na resposta do servidor")
    try:
        return Objective.model_validate(payload)
    except SchemaError as e:
        raise ResponseShapeError(
            "Objetivo inválido na resposta do servidor",
            details={"errors": e.errors(include_url=False, include_input=False)}
        ) from e

def decode_objective_list(payload: Any) -> List[Objective]:
    if not isinstance(payload, list):
        raise ResponseShapeError("Lista de objetivos inválida na resposta do servidor")
    return [decode_objective(item) for item in payload]

def decode_avatar_response(response: httpx.Response) -> str:
    """Avatar URL when the backend returns one, else its confirmation text"""
    body = read_json(response)
    if isinstance(body, dict):
        for key in ("avatar", "avatar_url", "url", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        raise ResponseShapeError(
            "Resposta de envio de avatar não reconhecida",
            details={"keys": sorted(body.keys())}
        )
    if isinstance(body, str) and body:
        return body
    text = response.text.strip() if response.content else ""
    if not text:
        raise ResponseShapeError("Resposta de envio de avatar vazia")
    return text
