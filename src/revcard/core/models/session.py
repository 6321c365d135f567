"""
Entidades de Estado da Sessão.

As chaves de `to_dict()`/`from_dict()` seguem o camelCase do backend, que é
também o layout gravado em disco.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UserRef:
    """Identificador da conta retornado junto do token."""
    id: str
    state: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional[UserRef]:
        if not data or not data.get("id"):
            return None
        return cls(id=str(data["id"]), state=data.get("state"))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        if self.state is not None:
            out["state"] = self.state
        return out


@dataclass(frozen=True)
class SignInTicket:
    """Ticket do `POST /signin`, usado apenas no polling de consentimento."""
    token_id: str


@dataclass(frozen=True)
class TokenState:
    """
    Estado do token emitido pelo backend.

    Attributes:
        access_token: Token de acesso atual
        refresh_code: Código usado no `PUT /token`
        token_expiry_date: Expiração em epoch ms (None = desconhecida)
        user: Conta dona do token
    """
    access_token: str
    refresh_code: str
    token_expiry_date: Optional[int] = None
    user: Optional[UserRef] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    def is_valid_at(self, now_ms: int) -> bool:
        """True se a expiração conhecida é estritamente maior que `now_ms`."""
        return self.token_expiry_date is not None and self.token_expiry_date > now_ms

    def refreshed(self, data: Dict[str, Any]) -> TokenState:
        """Nova instância com os campos de uma resposta de refresh aplicados."""
        return replace(
            self,
            access_token=data["accessToken"],
            refresh_code=data["refreshCode"],
            token_expiry_date=data.get("tokenExpiryDate", self.token_expiry_date),
            user=UserRef.from_dict(data.get("user")) or self.user,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TokenState:
        expiry = data.get("tokenExpiryDate")
        return cls(
            access_token=data.get("accessToken") or "",
            refresh_code=data.get("refreshCode") or "",
            token_expiry_date=int(expiry) if expiry is not None else None,
            user=UserRef.from_dict(data.get("user")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "accessToken": self.access_token,
            "refreshCode": self.refresh_code,
            "tokenExpiryDate": self.token_expiry_date,
        }
        if self.user is not None:
            out["user"] = self.user.to_dict()
        return out


@dataclass(frozen=True)
class SessionCredentials:
    """Par de credenciais enviado como cookie e cabeçalho de autorização."""
    credentials: str
    refresh_token: str
    device_id: str

    @property
    def is_complete(self) -> bool:
        return bool(self.credentials and self.refresh_token)


@dataclass(frozen=True)
class PersistedSession:
    """Layout persistido: `{credentials, refreshToken, deviceId, data}`."""
    credentials: SessionCredentials
    token: TokenState

    @property
    def device_id(self) -> str:
        return self.credentials.device_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PersistedSession:
        """
        Reconstrói a sessão gravada.

        Raises:
            KeyError: Se alguma das chaves obrigatórias faltar
        """
        return cls(
            credentials=SessionCredentials(
                credentials=data["credentials"],
                refresh_token=data["refreshToken"],
                device_id=data["deviceId"],
            ),
            token=TokenState.from_dict(data["data"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "credentials": self.credentials.credentials,
            "refreshToken": self.credentials.refresh_token,
            "deviceId": self.credentials.device_id,
            "data": self.token.to_dict(),
        }
