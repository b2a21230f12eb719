import httpx
from typing import Optional, List, Dict, Any
from fitpulse.configuration.config import Config
from fitpulse.configuration.monitor import log_event, log_exception, start_span
from fitpulse.models.mod_user import User, Objective
from fitpulse.schemas.sch_auth import RegisterData, ProfileUpdateRequest, AvatarUpload
from fitpulse.services.svc_errors import ApiError, AuthError, NetworkError
from fitpulse.services.svc_decode import (
    decode_auth_response,
    decode_user_record,
    decode_objective,
    decode_objective_list,
    decode_avatar_response,
    extract_error_message,
    read_json
)
from fitpulse.validators.val_user import UserValidator

class ApiService:
    """HTTP client for the FitPulse REST backend"""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url or Config.API_URL).rstrip("/")
        self.transport = transport
        self.timeout = timeout if timeout is not None else Config.API_TIMEOUT

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self.transport, timeout=self.timeout)

    async def _send(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            async with self._client() as client:
                return await client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise NetworkError(details={"path": path, "reason": str(e)}) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, default_message: str, error_class=ApiError) -> None:
        if response.is_success:
            return
        raise error_class(
            extract_error_message(response, default_message),
            status_code=response.status_code
        )

    async def login(self, email: str, password: str) -> User:
        """
        Authenticate against the backend

        Returns:
            The logged-in user; a placeholder user when the backend only returns a token

        Raises:
            AuthError: The backend rejected the credentials
        """
        try:
            with start_span("login", attributes={"email": email}):
                log_event("Login started", {"email": email})

                response = await self._send("POST", "/user/login", json={"email": email, "password": password})
                self._raise_for_status(response, "Falha ao realizar login", AuthError)
                user = decode_auth_response(response, email)

                log_event("Login succeeded", {
                    "user_id": user.id,
                    "role": user.role.value,
                    "placeholder": user.is_placeholder
                })
                return user
        except Exception as e:
            log_exception(e, {"operation": "login", "email": email})
            raise

    async def register(self, data: RegisterData) -> User:
        """
        Create an account on the backend

        Raises:
            ValidationError: Weight or height out of bounds, before any request
            AuthError: The backend rejected the registration
        """
        try:
            with start_span("register", attributes={"email": data.email, "role": data.role.value}):
                log_event("Registration started", {"email": data.email, "role": data.role.value})

                payload = UserValidator.build_registration_payload(data)
                response = await self._send("POST", "/user/create", json=payload)
                self._raise_for_status(response, "Falha ao realizar cadastro", AuthError)
                user = decode_auth_response(response, data.email, name=data.name, role=data.role)

                log_event("Registration succeeded", {"user_id": user.id, "role": user.role.value})
                return user
        except Exception as e:
            log_exception(e, {"operation": "register", "email": data.email})
            raise

    async def get_user_profile(self, token: str) -> User:
        """Fetch the authenticated user's canonical profile"""
        try:
            with start_span("get_user_profile"):
                response = await self._send("GET", "/user/list", token=token)
                self._raise_for_status(response, "Falha ao carregar perfil")
                user = decode_user_record(read_json(response), token=token)

                log_event("Profile retrieved", {"user_id": user.id})
                return user
        except Exception as e:
            log_exception(e, {"operation": "get_user_profile"})
            raise

    async def update_user_profile(self, token: str, data: ProfileUpdateRequest) -> User:
        """Send a partial update, then re-fetch the canonical profile"""
        try:
            with start_span("update_user_profile"):
                payload = UserValidator.build_profile_update_payload(data)
                log_event("Profile update started", {"fields": ",".join(sorted(payload))})

                response = await self._send("PUT", "/user/update", token=token, json=payload)
                self._raise_for_status(response, "Falha ao atualizar perfil")

                return await self.get_user_profile(token)
        except Exception as e:
            log_exception(e, {"operation": "update_user_profile"})
            raise

    async def upload_avatar(self, token: str, file: AvatarUpload) -> str:
        """Upload a profile picture; returns the avatar URL or the backend's confirmation"""
        try:
            with start_span("upload_avatar", attributes={"filename": file.filename}):
                log_event("Avatar upload started", {
                    "filename": file.filename,
                    "size": len(file.content)
                })

                files = {"file": (file.filename, file.content, file.content_type)}
                response = await self._send("PUT", "/user/upload", token=token, files=files)
                self._raise_for_status(response, "Falha ao enviar avatar")
                result = decode_avatar_response(response)

                log_event("Avatar uploaded", {"filename": file.filename})
                return result
        except Exception as e:
            log_exception(e, {"operation": "upload_avatar", "filename": file.filename})
            raise

    async def create_objective(self, token: str, name: str) -> Objective:
        try:
            with start_span("create_objective", attributes={"name": name}):
                response = await self._send("POST", "/user/objective/create", token=token, json={"name": name})
                self._raise_for_status(response, "Falha ao criar objetivo")
                objective = decode_objective(read_json(response))

                log_event("Objective created", {"objective_id": objective.id, "name": objective.name})
                return objective
        except Exception as e:
            log_exception(e, {"operation": "create_objective", "name": name})
            raise

    async def link_objective_to_user(self, token: str, objective_ids: List[int]) -> None:
        try:
            with start_span("link_objective_to_user", attributes={"count": len(objective_ids)}):
                response = await self._send(
                    "POST", "/user/objective/link", token=token, json={"objectiveIds": list(objective_ids)}
                )
                self._raise_for_status(response, "Falha ao vincular objetivos")

                log_event("Objectives linked", {"objective_ids": objective_ids})
        except Exception as e:
            log_exception(e, {"operation": "link_objective_to_user", "objective_ids": objective_ids})
            raise

    async def get_all_objectives(self, token: str) -> List[Objective]:
        try:
            with start_span("get_all_objectives"):
                response = await self._send("GET", "/user/objective/list/all", token=token)
                self._raise_for_status(response, "Falha ao carregar objetivos")
                return decode_objective_list(read_json(response))
        except Exception as e:
            log_exception(e, {"operation": "get_all_objectives"})
            raise

    async def get_user_objectives(self, token: str) -> List[Objective]:
        try:
            with start_span("get_user_objectives"):
                response = await self._send("GET", "/user/objective/list/byUser", token=token)
                self._raise_for_status(response, "Falha ao carregar seus objetivos")
                return decode_objective_list(read_json(response))
        except Exception as e:
            log_exception(e, {"operation": "get_user_objectives"})
            raise

    async def create_trainer(self, token: str, cref: str) -> None:
        """Submit a trainer's professional registration (CREF)"""
        try:
            with start_span("create_trainer"):
                payload: Dict[str, Any] = {"cref": cref}
                response = await self._send("POST", "/trainer/create", token=token, json=payload)
                self._raise_for_status(response, "Falha ao salvar dados profissionais")

                log_event("Trainer details submitted")
        except Exception as e:
            log_exception(e, {"operation": "create_trainer"})
            raise
