"""
Gerenciamento do token de acesso.

O TokenRefreshManager é o dono do estado em memória da sessão (TokenState
e SessionCredentials) e o único lugar onde ele é substituído.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Optional

from revcard.core.exceptions import (
    NeedsReauthenticationError,
    RevcardBaseException,
    SessionNotInitializedException,
)
from revcard.core.interfaces import SessionStore
from revcard.core.models import PersistedSession, SessionCredentials, TokenState
from revcard.core.services.base_service import BaseService
from revcard.core.services.crypto import encode_credentials, encode_refresh
from revcard.core.services.device import DeviceIdentity

if TYPE_CHECKING:
    from revcard.adapters.api.bank_api import BankAPI


def now_ms() -> int:
    """Relógio padrão em epoch ms."""
    return int(time.time() * 1000)


class TokenRefreshManager(BaseService):
    """
    Mantém o token válido, renovando-o via `PUT /token` quando expira.

    Leitura, verificação, renovação e escrita acontecem sob o mesmo lock
    reentrante, assim como a derivação das credenciais.
    """

    def __init__(
        self,
        api: "BankAPI",
        store: SessionStore,
        device: DeviceIdentity,
        clock: Optional[Callable[[], int]] = None,
        logger: Optional[Any] = None,
    ):
        super().__init__(logger)
        self.api = api
        self.store = store
        self.device = device
        self.clock = clock or now_ms
        self._lock = threading.RLock()
        self._token: Optional[TokenState] = None
        self._cookies: Optional[SessionCredentials] = None

    # --- Estado ---

    @property
    def token(self) -> Optional[TokenState]:
        return self._token

    @property
    def is_initialized(self) -> bool:
        return self._token is not None and self._cookies is not None

    def install(self, session: PersistedSession) -> None:
        """Adota uma sessão (recém-emitida ou retomada do store)."""
        with self._lock:
            self._token = session.token
            self._cookies = session.credentials

    def reset(self) -> None:
        with self._lock:
            self._token = None
            self._cookies = None

    def _derive(self, token: TokenState, fallback: SessionCredentials) -> SessionCredentials:
        # Depois que um token com usuário existe, as credenciais derivadas
        # substituem os valores dos cookies
        if token.user_id and token.access_token:
            refresh = encode_refresh(token.refresh_code) if token.refresh_code else fallback.refresh_token
            return SessionCredentials(
                credentials=encode_credentials(token.user_id, token.access_token),
                refresh_token=refresh,
                device_id=self.device.value,
            )
        return SessionCredentials(
            credentials=fallback.credentials,
            refresh_token=fallback.refresh_token,
            device_id=self.device.value,
        )

    def credentials(self) -> SessionCredentials:
        """
        Credenciais a usar na próxima chamada autenticada.

        Raises:
            SessionNotInitializedException: Sem sessão ou com tokens vazios
        """
        with self._lock:
            if not self.is_initialized:
                raise SessionNotInitializedException("Nenhuma sessão ativa; faça login primeiro")
            creds = self._derive(self._token, self._cookies)
            if not creds.is_complete:
                raise SessionNotInitializedException("Credenciais da sessão estão vazias")
            return creds

    # --- Refresh ---

    def ensure_valid(self, force: bool = False) -> bool:
        """
        Garante um token válido.

        Args:
            force: Renova mesmo que a expiração ainda esteja no futuro

        Returns:
            bool: True se houve renovação, False se o token ainda era válido

        Raises:
            SessionNotInitializedException: Se não há sessão instalada
            NeedsReauthenticationError: Se o backend não renovou o token;
                estado em memória e store ficam intactos
        """
        with self._lock:
            if not self.is_initialized:
                raise SessionNotInitializedException("Nenhuma sessão ativa; faça login primeiro")

            token = self._token
            if not force and token.is_valid_at(self.clock()):
                return False

            self.logger.debug("Renovando token", forcado=force)
            creds = self.credentials()

            try:
                payload = self.api.refresh_token(token.user_id or "", token.refresh_code, creds)
            except RevcardBaseException as e:
                self.logger.aviso("Backend recusou a renovação do token")
                raise NeedsReauthenticationError(
                    "Falha ao renovar token",
                    payload=getattr(e, "payload", None),
                    cause=e,
                ) from e

            if not isinstance(payload, dict) or not payload.get("accessToken") or not payload.get("refreshCode"):
                self.logger.aviso("Resposta de renovação sem accessToken/refreshCode")
                raise NeedsReauthenticationError("Resposta inesperada ao renovar token", payload=payload)

            new_token = token.refreshed(payload)
            new_creds = self._derive(new_token, self._cookies)
            self.store.save(PersistedSession(credentials=new_creds, token=new_token))

            self._token = new_token
            self._cookies = new_creds
            self.logger.sucesso("Token renovado", expira_em=new_token.token_expiry_date)
            return True
