"""
Operações de cartão.

Cada operação garante o token antes da chamada e usa as credenciais
correntes do TokenRefreshManager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

from revcard.config.models import CardsConfig
from revcard.core.exceptions import CardNotFoundError, InvalidAPIResponseException
from revcard.core.models import CardDetails, CardExpiry, CardSecrets, CardSummary
from revcard.core.services.base_service import BaseService
from revcard.core.services.crypto import decrypt_field, derive_key
from revcard.core.services.token_service import TokenRefreshManager

if TYPE_CHECKING:
    from revcard.adapters.api.bank_api import BankAPI


class CardService(BaseService):
    """Listagem, leitura de segredos, emissão e exclusão de cartões."""

    def __init__(
        self,
        api: "BankAPI",
        tokens: TokenRefreshManager,
        config: Optional[CardsConfig] = None,
        logger: Optional[Any] = None,
    ):
        super().__init__(logger)
        self.api = api
        self.tokens = tokens
        self.config = config or CardsConfig()

    @staticmethod
    def _as_details(payload: Any, operation: str) -> CardDetails:
        if not isinstance(payload, dict):
            raise InvalidAPIResponseException(
                f"Resposta de {operation} com formato inválido",
                details={"type": type(payload).__name__},
            )
        return CardDetails.from_dict(payload)

    def list_cards(self) -> List[CardSummary]:
        """Todos os cartões da conta (`GET /cards`)."""
        self.tokens.ensure_valid(False)
        payload = self.api.list_cards(self.tokens.credentials())

        if not isinstance(payload, list):
            raise InvalidAPIResponseException(
                "Lista de cartões com formato inválido",
                details={"type": type(payload).__name__},
            )
        cards = [CardSummary.from_dict(item) for item in payload if isinstance(item, dict)]
        self.logger.debug(f"{len(cards)} cartões encontrados")
        return cards

    def get_card(self, card_id: str) -> CardDetails:
        """Detalhe cru do cartão, sem decifrar nada."""
        self.tokens.ensure_valid(False)
        payload = self.api.get_card(self.tokens.credentials(), card_id)
        return self._as_details(payload, "detalhe do cartão")

    def get_card_secrets(self, card_id: str) -> CardSecrets:
        """
        PAN, CVV e validade decifrados.

        Raises:
            CardNotFoundError: Se a resposta não trouxer `pan` ou `cvv`
            DecryptionError: Se algum campo não decifrar
        """
        self.tokens.ensure_valid(False)
        creds = self.tokens.credentials()
        payload = self.api.get_card(creds, card_id)

        if not isinstance(payload, dict) or not payload.get("pan") or not payload.get("cvv"):
            raise CardNotFoundError("Cartão não encontrado", details={"card_id": card_id})

        key = derive_key(creds.credentials)
        secrets = CardSecrets(
            pan=decrypt_field(payload["pan"], key),
            cvv=decrypt_field(payload["cvv"], key),
            expiry=CardExpiry.from_dict(payload.get("expiry")),
        )
        self.logger.debug("Segredos do cartão decifrados", card_id=card_id)
        return secrets

    def _issue(self, design: str, disposable: bool, label: str) -> CardDetails:
        self.tokens.ensure_valid(False)
        payload = self.api.issue_card(self.tokens.credentials(), design, disposable, label)
        card = self._as_details(payload, "emissão de cartão")
        self.logger.sucesso("Cartão emitido", card_id=card.id, descartavel=disposable)
        return card

    def create_disposable_card(self, label: Optional[str] = None) -> CardDetails:
        """Emite um cartão virtual descartável; segredos continuam cifrados."""
        return self._issue(self.config.disposable_design, True, label or self.config.disposable_label)

    def create_virtual_card(self, label: str, design: Optional[str] = None) -> CardDetails:
        """Emite um cartão virtual comum (não descartável)."""
        return self._issue(design or self.config.disposable_design, False, label)

    def delete_card(self, card_id: str) -> CardDetails:
        self.tokens.ensure_valid(False)
        payload = self.api.delete_card(self.tokens.credentials(), card_id)
        card = self._as_details(payload, "exclusão de cartão")
        self.logger.info("Cartão excluído", card_id=card_id)
        return card

    def find_or_create_disposable_card(self, reuse_existing: Optional[bool] = None) -> str:
        """
        Id do cartão descartável a usar.

        Com `reuse_existing` o primeiro descartável existente é reaproveitado
        e um novo só é emitido se não houver nenhum; sem ele, emite sempre.
        """
        if reuse_existing is None:
            reuse_existing = self.config.reuse_existing_disposable_card

        if reuse_existing:
            for card in self.list_cards():
                if card.disposable:
                    self.logger.debug("Reutilizando cartão descartável", card_id=card.id)
                    return card.id

        return self.create_disposable_card().id
