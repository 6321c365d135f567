"""
Fachada do Revcard.

Monta dispositivo, cliente HTTP e serviços a partir da configuração e expõe
as operações de sessão e de cartão num único objeto.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, List, Optional

import requests

from revcard.adapters.api.bank_api import BankAPI
from revcard.config import AppConfig, get_config
from revcard.core.interfaces import SessionStore
from revcard.core.models import CardDetails, CardSecrets, CardSummary
from revcard.core.services import (
    AuthService,
    AuthState,
    CardService,
    DeviceIdentity,
    TokenRefreshManager,
)
from revcard.infrastructure.logging import get_logger


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Remove espaços do telefone digitado."""
    if phone is None:
        return None
    return "".join(phone.split()) or None


class BankClient:
    """
    Cliente de uma única conta.

    Example:
        client = BankClient("+44 7700900000", "1234", JsonFileSessionStore("revolut.json"))
        client.sign_in()
        secrets = client.get_card_secrets(client.find_or_create_disposable_card())
    """

    def __init__(
        self,
        phone_number: Optional[str],
        pin: str,
        session_store: SessionStore,
        config: Optional[AppConfig] = None,
        http_session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], int]] = None,
        logger: Optional[Any] = None,
    ):
        self.config = config or get_config()
        self.phone_number = normalize_phone(phone_number)
        self.store = session_store
        self.device = DeviceIdentity()

        base_logger = logger or get_logger()
        self.logger = base_logger.com_contexto(device_id=self.device.value)

        self.api = BankAPI(
            self.config.api,
            self.device,
            pin,
            session=http_session,
            logger=base_logger.com_contexto(cliente="BankAPI"),
        )
        self.tokens = TokenRefreshManager(
            self.api, self.store, self.device, clock=clock,
            logger=base_logger.com_contexto(servico="TokenRefreshManager"),
        )
        self.auth = AuthService(
            self.api, self.store, self.tokens, self.device,
            config=self.config.auth,
            logger=base_logger.com_contexto(servico="AuthService"),
        )
        self.cards = CardService(
            self.api, self.tokens,
            config=self.config.cards,
            logger=base_logger.com_contexto(servico="CardService"),
        )

    # --- Sessão ---

    @property
    def state(self) -> AuthState:
        return self.auth.state

    @property
    def device_id(self) -> str:
        return self.device.value

    def sign_in(self, cancel: Optional[threading.Event] = None,
                max_attempts: Optional[int] = None) -> AuthState:
        with self.logger.etapa("login"):
            return self.auth.sign_in(self.phone_number, cancel=cancel, max_attempts=max_attempts)

    def ensure_valid(self, force: bool = False) -> bool:
        return self.tokens.ensure_valid(force)

    # --- Cartões ---

    def list_cards(self) -> List[CardSummary]:
        return self.cards.list_cards()

    def get_card(self, card_id: str) -> CardDetails:
        return self.cards.get_card(card_id)

    def get_card_secrets(self, card_id: str) -> CardSecrets:
        return self.cards.get_card_secrets(card_id)

    def create_disposable_card(self, label: Optional[str] = None) -> CardDetails:
        return self.cards.create_disposable_card(label)

    def create_virtual_card(self, label: str, design: Optional[str] = None) -> CardDetails:
        return self.cards.create_virtual_card(label, design)

    def delete_card(self, card_id: str) -> CardDetails:
        return self.cards.delete_card(card_id)

    def find_or_create_disposable_card(self, reuse_existing: Optional[bool] = None) -> str:
        return self.cards.find_or_create_disposable_card(reuse_existing)
