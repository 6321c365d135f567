"""Sistema centralizado de exceções customizadas do Revcard."""

from __future__ import annotations
from typing import Any, Optional


class RevcardBaseException(Exception):
    """Exceção base para todas as exceções customizadas do Revcard."""

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base = f"{base} ({details_str})"
        if self.cause:
            base = f"{base} | Causa: {self.cause}"
        return base

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# ==================== Exceções de Rede ====================

class NetworkException(RevcardBaseException):
    """Exceção base para erros relacionados à rede."""
    pass


class RequestException(NetworkException):
    """Erro em requisição HTTP."""
    pass


class RequestTimeoutException(RequestException):
    """Timeout em requisição HTTP."""
    pass


# ==================== Exceções de API ====================

class APIException(RevcardBaseException):
    """Exceção base para erros de API."""
    pass


class InvalidAPIResponseException(APIException):
    """Resposta de API inválida ou inesperada."""
    pass


class BackendErrorException(APIException):
    """
    O backend respondeu com status HTTP de erro.

    O corpo da resposta (``{code, message}`` na maioria dos casos) fica
    disponível em ``payload`` para diagnóstico.
    """

    def __init__(self, status_code: int, payload: Any = None, url: Optional[str] = None):
        self.status_code = status_code
        self.payload = payload
        self.url = url
        details: dict[str, Any] = {"status_code": status_code, "payload": payload}
        if url:
            details["url"] = url
        super().__init__(f"Backend respondeu com status {status_code}", details=details)

    @property
    def code(self) -> Optional[int]:
        """Código de erro do backend, se presente no payload."""
        if isinstance(self.payload, dict):
            return self.payload.get("code")
        return None


class CardNotFoundError(APIException):
    """Resposta de detalhes do cartão sem os campos secretos (CVV/PAN)."""
    pass


# ==================== Exceções de Autenticação ====================

class AuthenticationException(RevcardBaseException):
    """Exceção base para erros de autenticação."""
    pass


class MissingPhoneNumberError(AuthenticationException):
    """Login completo solicitado sem número de telefone."""
    pass


class SignInRejectedError(AuthenticationException):
    """Backend rejeitou telefone/PIN no pedido de login."""
    pass


class ConsentTimeoutOrRejected(AuthenticationException):
    """
    Polling de consentimento encerrado sem token.

    ``reason`` indica o motivo: ``"rejected"`` (código de erro não
    recuperável), ``"cancelled"`` ou ``"max_attempts"``.
    """

    def __init__(self, message: str, *, reason: str = "rejected", payload: Any = None, attempts: int = 0):
        self.reason = reason
        self.payload = payload
        self.attempts = attempts
        super().__init__(
            message,
            details={"reason": reason, "payload": payload, "attempts": attempts},
        )


# ==================== Exceções de Sessão ====================

class SessionException(RevcardBaseException):
    """Exceção base para erros de sessão."""
    pass


class SessionNotInitializedException(SessionException):
    """Sessão não foi inicializada."""
    pass


class NeedsReauthenticationError(SessionException):
    """Refresh rejeitado: a sessão deve ser descartada e o login refeito."""

    def __init__(self, message: str, *, payload: Any = None, cause: Optional[Exception] = None):
        self.payload = payload
        super().__init__(message, details={"payload": payload} if payload is not None else None, cause=cause)


# ==================== Exceções de Criptografia ====================

class CryptoException(RevcardBaseException):
    """Exceção base para erros criptográficos (não recuperáveis)."""
    pass


class MalformedCredentialsError(CryptoException):
    """Credencial não permite derivar uma chave de 256 bits."""
    pass


class DecryptionError(CryptoException):
    """Falha de formato ou padding ao decifrar um campo."""
    pass


# ==================== Exceções de Configuração ====================

class ConfigurationException(RevcardBaseException):
    """Exceção base para erros de configuração."""
    pass


class InvalidConfigException(ConfigurationException):
    """Configuração inválida."""
    pass


# ==================== Helpers ====================

def wrap_exception(exc: Exception, wrapper_class: type[RevcardBaseException], message: str, **details: Any) -> RevcardBaseException:
    """
    Envolve uma exceção existente em uma exceção customizada.

    Args:
        exc: Exceção original
        wrapper_class: Classe da exceção customizada
        message: Mensagem descritiva
        **details: Detalhes adicionais

    Returns:
        Instância da exceção customizada
    """
    return wrapper_class(message, details=details, cause=exc)


__all__ = [
    # Base
    "RevcardBaseException",
    # Network
    "NetworkException",
    "RequestException",
    "RequestTimeoutException",
    # API
    "APIException",
    "InvalidAPIResponseException",
    "BackendErrorException",
    "CardNotFoundError",
    # Authentication
    "AuthenticationException",
    "MissingPhoneNumberError",
    "SignInRejectedError",
    "ConsentTimeoutOrRejected",
    # Session
    "SessionException",
    "SessionNotInitializedException",
    "NeedsReauthenticationError",
    # Crypto
    "CryptoException",
    "MalformedCredentialsError",
    "DecryptionError",
    # Configuration
    "ConfigurationException",
    "InvalidConfigException",
    # Helpers
    "wrap_exception",
]
