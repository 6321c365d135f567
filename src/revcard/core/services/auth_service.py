"""
Máquina de estados da autenticação.

Dois caminhos levam a AUTHENTICATED:

* login completo: `POST /signin`, depois polling de `POST /token` até o
  usuário aprovar a notificação no celular;
* retomada: a sessão gravada é carregada e, se expirada, renovada.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from revcard.config.models import AuthConfig
from revcard.core.exceptions import (
    BackendErrorException,
    ConsentTimeoutOrRejected,
    InvalidAPIResponseException,
    MissingPhoneNumberError,
    NeedsReauthenticationError,
    SignInRejectedError,
)
from revcard.core.interfaces import SessionStore
from revcard.core.models import PersistedSession, SessionCredentials, SignInTicket, TokenState
from revcard.core.services.base_service import BaseService
from revcard.core.services.device import DeviceIdentity
from revcard.core.services.token_service import TokenRefreshManager

if TYPE_CHECKING:
    from revcard.adapters.api.bank_api import BankAPI


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_CONSENT = "awaiting_consent"
    RESUMING = "resuming"
    AUTHENTICATED = "authenticated"
    NEEDS_REAUTHENTICATION = "needs_reauthentication"


class AuthService(BaseService):
    """
    Conduz o login e mantém o estado da autenticação.

    NEEDS_REAUTHENTICATION é terminal: cabe ao chamador limpar o store e
    começar de novo com outra instância.
    """

    def __init__(
        self,
        api: "BankAPI",
        store: SessionStore,
        tokens: TokenRefreshManager,
        device: DeviceIdentity,
        config: Optional[AuthConfig] = None,
        logger: Optional[Any] = None,
    ):
        super().__init__(logger)
        self.api = api
        self.store = store
        self.tokens = tokens
        self.device = device
        self.config = config or AuthConfig()
        self._state = AuthState.UNAUTHENTICATED

    @property
    def state(self) -> AuthState:
        return self._state

    def _transition(self, new_state: AuthState) -> None:
        self.logger.debug(f"Estado: {self._state.name} -> {new_state.name}")
        self._state = new_state

    def sign_in(
        self,
        phone: Optional[str],
        cancel: Optional[threading.Event] = None,
        max_attempts: Optional[int] = None,
    ) -> AuthState:
        """
        Autentica, retomando a sessão gravada quando houver uma.

        Args:
            phone: Telefone (obrigatório só no login completo)
            cancel: Evento que interrompe o polling quando setado
            max_attempts: Limite de chamadas de polling (padrão: config)

        Returns:
            AuthState: AUTHENTICATED

        Raises:
            MissingPhoneNumberError: Login completo sem telefone
            SignInRejectedError: `POST /signin` recusado
            ConsentTimeoutOrRejected: Polling encerrado sem token
            NeedsReauthenticationError: Sessão retomada não pôde ser renovada
        """
        if self._state is AuthState.NEEDS_REAUTHENTICATION:
            raise NeedsReauthenticationError("Sessão exige novo login; limpe o store e recomece")

        session = self.store.load()
        if session is not None:
            return self._resume(session)

        if not phone:
            raise MissingPhoneNumberError("Número de telefone é obrigatório para o login")

        ticket = self._request_sign_in(phone)
        if max_attempts is None:
            max_attempts = self.config.max_poll_attempts
        new_session = self._wait_for_consent(phone, ticket, cancel, max_attempts)

        self.store.save(new_session)
        self.tokens.install(new_session)
        self._transition(AuthState.AUTHENTICATED)
        self.logger.sucesso("Login concluído")
        return self._state

    # --- Retomada ---

    def _resume(self, session: PersistedSession) -> AuthState:
        self._transition(AuthState.RESUMING)
        self.device.restore(session.device_id)
        self.tokens.install(session)

        try:
            self.tokens.ensure_valid(False)
        except NeedsReauthenticationError:
            self._transition(AuthState.NEEDS_REAUTHENTICATION)
            raise

        self._transition(AuthState.AUTHENTICATED)
        self.logger.info("Sessão retomada")
        return self._state

    # --- Login completo ---

    def _request_sign_in(self, phone: str) -> SignInTicket:
        try:
            payload = self.api.sign_in(phone)
        except BackendErrorException as e:
            raise SignInRejectedError(
                "Backend recusou telefone/PIN",
                details={"payload": e.payload, "status_code": e.status_code},
                cause=e,
            ) from e

        token_id = payload.get("tokenId") if isinstance(payload, dict) else None
        if not token_id:
            raise InvalidAPIResponseException(
                "Resposta de login sem tokenId",
                details={"payload": payload},
            )

        self._transition(AuthState.AWAITING_CONSENT)
        self.logger.info("Aguardando aprovação do login no aplicativo")
        return SignInTicket(token_id=token_id)

    def _fail_polling(self, message: str, reason: str, attempts: int, payload: Any = None) -> ConsentTimeoutOrRejected:
        self._transition(AuthState.NEEDS_REAUTHENTICATION)
        self.logger.aviso(message, motivo=reason, tentativas=attempts)
        return ConsentTimeoutOrRejected(message, reason=reason, payload=payload, attempts=attempts)

    def _wait_for_consent(
        self,
        phone: str,
        ticket: SignInTicket,
        cancel: Optional[threading.Event],
        max_attempts: Optional[int],
    ) -> PersistedSession:
        """Faz polling de `POST /token` até o token sair ou o backend recusar."""
        waiter = cancel or threading.Event()
        attempts = 0

        while True:
            if cancel is not None and cancel.is_set():
                raise self._fail_polling("Polling de consentimento cancelado", "cancelled", attempts)
            if max_attempts is not None and attempts >= max_attempts:
                raise self._fail_polling("Limite de tentativas de polling atingido", "max_attempts", attempts)

            attempts += 1
            try:
                payload, cookies = self.api.request_token(phone, ticket.token_id)
            except BackendErrorException as e:
                payload, code = e.payload, e.code
            else:
                if payload.get("tokenExpiryDate"):
                    return self._build_session(payload, cookies)
                code = payload.get("code")

            if code != self.config.consent_pending_code:
                raise self._fail_polling("Login recusado pelo backend", "rejected", attempts, payload)

            self.logger.debug("Consentimento pendente", tentativa=attempts)
            if waiter.wait(self.config.poll_interval):
                raise self._fail_polling("Polling de consentimento cancelado", "cancelled", attempts)

    def _build_session(self, payload: dict, cookies: list) -> PersistedSession:
        if len(cookies) < 2 or not cookies[0] or not cookies[1]:
            self._transition(AuthState.NEEDS_REAUTHENTICATION)
            raise InvalidAPIResponseException(
                "Token emitido sem cookies de credenciais",
                details={"cookies": len(cookies)},
            )

        return PersistedSession(
            credentials=SessionCredentials(
                credentials=cookies[0],
                refresh_token=cookies[1],
                device_id=self.device.value,
            ),
            token=TokenState.from_dict(payload),
        )
