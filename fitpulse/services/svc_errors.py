from typing import Optional, Dict, Any

class ApiError(Exception):
    """Base error for every failure surfaced by the FitPulse client.

    `message` is always human readable and safe to show to the user.
    """

    code = "api_error"

    # Fallback messages when the backend gives none
    ERROR_MESSAGES = {
        "api_error": "Falha ao comunicar com o servidor",
        "auth_error": "Falha na autenticação",
        "network_error": "Não foi possível conectar ao servidor",
        "unexpected_response": "Resposta inesperada do servidor",
        "validation_error": "Dados inválidos",
    }

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message or self.ERROR_MESSAGES.get(self.code, "Erro inesperado")
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_detail(self, context: str = "") -> Dict[str, Any]:
        """
        Build a structured error object

        Args:
            context: Additional context about where the error occurred

        Returns:
            A dict matching the ErrorDetail schema
        """
        error_obj = {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
        }
        if context:
            error_obj["context"] = context
        if self.details:
            error_obj["details"] = self.details
        return error_obj

class AuthError(ApiError):
    """Login or registration rejected by the backend"""
    code = "auth_error"

class NetworkError(ApiError):
    """The backend could not be reached"""
    code = "network_error"

class ResponseShapeError(ApiError):
    """The backend answered with a payload the client does not understand"""
    code = "unexpected_response"
