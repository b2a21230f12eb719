import asyncio
from datetime import datetime, timezone
from typing import Optional, List, Tuple
from pydantic import ValidationError as SchemaError
from fitpulse.configuration.monitor import log_event, log_exception, log_warning, start_span
from fitpulse.configuration.storage import StorageBackend
from fitpulse.models.mod_user import User, Objective
from fitpulse.schemas.sch_auth import (
    RegisterData,
    AdditionalUserData,
    ProfileUpdateRequest,
    AvatarUpload,
    Notification,
    SessionStateResponse
)
from fitpulse.services.svc_api import ApiService
from fitpulse.services.svc_errors import ApiError, AuthError
from fitpulse.services.svc_decode import PLACEHOLDER_USER_ID
from fitpulse.validators.val_user import UserValidator

USER_KEY = "fitpulse-user"
TOKEN_KEY = "fitpulse-token"

class SessionStore:
    """Persisted user and token, on top of a local-storage backend"""

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    def get_user(self) -> Optional[User]:
        raw = self.storage.get_item(USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except SchemaError as e:
            log_warning("Discarding malformed persisted user", {"error": str(e)})
            self.storage.remove_item(USER_KEY)
            return None

    def get_token(self) -> Optional[str]:
        return self.storage.get_item(TOKEN_KEY)

    def get(self) -> Tuple[Optional[User], Optional[str]]:
        return self.get_user(), self.get_token()

    def set(self, user: User, token: Optional[str] = None) -> None:
        self.storage.set_item(USER_KEY, user.model_dump_json())
        if token:
            self.storage.set_item(TOKEN_KEY, token)
        else:
            self.storage.remove_item(TOKEN_KEY)

    def clear(self) -> None:
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(TOKEN_KEY)

class AuthSession:
    """
    Process-wide authentication state: who is logged in and whether a
    registration is in progress.

    Operations that change the user are serialized, so a double submit
    waits for the first attempt instead of racing it.
    """

    def __init__(self, api: ApiService, store: SessionStore):
        self.api = api
        self.store = store
        self.user: Optional[User] = None
        self.registration_data: Optional[RegisterData] = None
        self.notifications: List[Notification] = []
        self.loading = True
        self._lock = asyncio.Lock()
        self.hydrate()

    def hydrate(self) -> None:
        """Load the persisted user, if any"""
        self.loading = True
        try:
            self.user = self.store.get_user()
        finally:
            self.loading = False

    @property
    def token(self) -> Optional[str]:
        return self.store.get_token()

    @property
    def registration_pending(self) -> bool:
        return self.registration_data is not None

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        self.notifications.append(Notification(title=title, description=description, variant=variant))
        log_event("Notification", {"title": title, "variant": variant})

    def drain_notifications(self) -> List[Notification]:
        notifications, self.notifications = self.notifications, []
        return notifications

    def state(self) -> SessionStateResponse:
        return SessionStateResponse(
            user=self.user,
            loading=self.loading,
            registration_pending=self.registration_pending,
            notifications=self.drain_notifications()
        )

    def require_token(self) -> str:
        token = self.token
        if not token:
            raise AuthError("Sessão expirada, faça login novamente", status_code=401)
        return token

    async def _refine(self, user: User) -> User:
        """Replace a placeholder user with the backend profile when possible"""
        if not user.is_placeholder or not user.token:
            return user
        try:
            return await self.api.get_user_profile(user.token)
        except ApiError as e:
            log_warning("Keeping placeholder user, profile refinement failed", {"error": e.message})
            return user

    async def login(self, email: str, password: str) -> User:
        async with self._lock:
            self.loading = True
            try:
                user = await self._refine(await self.api.login(email, password))
                self.user = user
                self.store.set(user, user.token)
                self.notify("Login realizado com sucesso", f"Bem-vindo(a) de volta, {user.name}!")
                return user
            except ApiError as e:
                self.notify("Erro ao realizar login", e.message, "destructive")
                raise
            finally:
                self.loading = False

    def register(self, data: RegisterData) -> User:
        """
        Start the two-phase registration: keep the data in memory and let the
        UI continue with a placeholder user. Nothing is sent to the backend yet.
        """
        UserValidator.validate_password_confirmation(data)
        self.registration_data = data
        self.user = User(
            id=PLACEHOLDER_USER_ID,
            name=data.name,
            email=data.email,
            role=data.role,
            username=data.username,
            status=data.status,
            phone=data.phone or None,
            gender=data.gender or None,
            date_of_birth=data.date_of_birth,
            created_at=datetime.now(timezone.utc),
            is_placeholder=True,
        )
        log_event("Registration pending", {"email": data.email, "role": data.role.value})
        return self.user

    def set_registration_data(self, data: Optional[RegisterData]) -> None:
        self.registration_data = data

    def merge_registration(self, additional: AdditionalUserData) -> RegisterData:
        """Merge the second registration step over the pending data"""
        if self.registration_data is None:
            raise ValueError("No registration in progress")
        updates = additional.model_dump(exclude_none=True, exclude={"avatar"})
        if "phone" in updates:
            updates["phone"] = UserValidator.format_phone(updates["phone"])
        merged = self.registration_data.model_copy(update=updates)
        UserValidator.validate_role_fields(merged)
        return merged

    async def complete_registration(self, additional: AdditionalUserData) -> bool:
        """
        Submit the pending registration merged with the second step

        Returns:
            True when the account was created, False when nothing was pending
        """
        async with self._lock:
            if self.registration_data is None:
                self.notify(
                    "Nenhum cadastro em andamento",
                    "Inicie o cadastro antes de completá-lo",
                    "destructive"
                )
                return False

            self.loading = True
            try:
                with start_span("complete_registration", attributes={"role": self.registration_data.role.value}):
                    merged = self.merge_registration(additional)
                    user = await self._refine(await self.api.register(merged))
                    self.registration_data = None
                    if not user.token:
                        # Account exists but the backend issued no token
                        self.user = None
                        self.store.clear()
                        self.notify("Cadastro realizado com sucesso", "Faça login para continuar")
                        log_event("Registration completed without token", {"user_id": user.id})
                        return True
                    self.user = user
                    self.store.set(user, user.token)
                    self.notify("Cadastro realizado com sucesso", f"Bem-vindo(a) ao Fit Pulse, {user.name}!")
                    return True
            except ApiError as e:
                self.notify("Erro ao realizar cadastro", e.message, "destructive")
                raise
            finally:
                self.loading = False

    def logout(self) -> None:
        user_id = self.user.id if self.user else None
        self.user = None
        self.registration_data = None
        self.store.clear()
        self.notify("Logout realizado", "Até a próxima!")
        log_event("Logout", {"user_id": user_id})

    async def refresh_profile(self) -> User:
        token = self.require_token()
        try:
            with start_span("refresh_profile"):
                user = await self.api.get_user_profile(token)
                self.user = user
                self.store.set(user, token)
                log_event("Profile refreshed", {"user_id": user.id})
                return user
        except Exception as e:
            log_exception(e, {"operation": "refresh_profile"})
            raise

    async def update_profile(self, data: ProfileUpdateRequest) -> User:
        async with self._lock:
            token = self.require_token()
            try:
                user = await self.api.update_user_profile(token, data)
            except ApiError as e:
                self.notify("Erro ao atualizar perfil", e.message, "destructive")
                raise
            self.user = user
            self.store.set(user, token)
            self.notify("Perfil atualizado", "Suas informações foram salvas")
            return user

    async def upload_avatar(self, file: AvatarUpload) -> str:
        async with self._lock:
            token = self.require_token()
            try:
                result = await self.api.upload_avatar(token, file)
            except ApiError as e:
                self.notify("Erro ao enviar foto", e.message, "destructive")
                raise
            if self.user is not None and result.startswith(("http://", "https://", "/")):
                self.user = self.user.model_copy(update={"avatar": result})
                self.store.set(self.user, token)
            self.notify("Foto atualizada", "Sua foto de perfil foi enviada")
            return result

    async def submit_trainer_details(self, cref: str) -> Optional[User]:
        token = self.require_token()
        try:
            await self.api.create_trainer(token, cref)
        except ApiError as e:
            self.notify("Erro ao salvar dados profissionais", e.message, "destructive")
            raise
        if self.user is not None:
            self.user = self.user.model_copy(update={"cref": cref})
            self.store.set(self.user, token)
        return self.user

    async def list_objectives(self) -> Tuple[List[Objective], List[Objective]]:
        """All objectives and the ones linked to the current user"""
        token = self.require_token()
        return await self.api.get_all_objectives(token), await self.api.get_user_objectives(token)

    async def create_objective(self, name: str) -> Objective:
        token = self.require_token()
        try:
            objective = await self.api.create_objective(token, name)
        except ApiError as e:
            self.notify("Erro", e.message or "Falha ao criar objetivo", "destructive")
            raise
        self.notify("Sucesso", "Objetivo criado com sucesso!")
        return objective

    async def link_objectives(self, objective_ids: List[int]) -> List[Objective]:
        token = self.require_token()
        try:
            await self.api.link_objective_to_user(token, objective_ids)
        except ApiError as e:
            self.notify("Erro", e.message or "Falha ao vincular objetivos", "destructive")
            raise
        self.notify("Sucesso", "Objetivos vinculados com sucesso!")
        return await self.api.get_user_objectives(token)
