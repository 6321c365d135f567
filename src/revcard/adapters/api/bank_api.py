"""
Cliente HTTP do backend bancário.

Conhece apenas o protocolo: endpoints, corpos, cabeçalhos fixos e cookies.
Estado de sessão e políticas (polling, refresh) ficam nos serviços do núcleo.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import requests

from revcard.config.constants import ENDPOINTS, SIGNIN_CHANNEL
from revcard.config.models import APIConfig
from revcard.core.exceptions import InvalidAPIResponseException
from revcard.core.models import SessionCredentials
from revcard.core.services.device import DeviceIdentity
from .base_api import BaseAPIClient


def cookie_value(header: str) -> str:
    """
    Valor de um cabeçalho `Set-Cookie` no formato usado pelo backend.

    O valor é base64 e o `=` final se perde no split, por isso é recolocado.
    Retorna string vazia se o cabeçalho não tiver `nome=valor`.
    """
    pair = header.split(";")[0].split("=")
    if len(pair) < 2 or not pair[1]:
        return ""
    return pair[1] + "="


class BankAPI(BaseAPIClient):
    """
    Endpoints do backend usados pelo Revcard.

    O PIN viaja em `X-Verify-Password`. Com `verify_password_always`
    desligado ele só é enviado nas duas chamadas de login.
    """

    def __init__(
        self,
        config: APIConfig,
        device: DeviceIdentity,
        pin: str,
        session: Optional[requests.Session] = None,
        logger: Optional[Any] = None,
    ):
        super().__init__(
            base_url=config.base_url,
            session=session,
            logger=logger,
            timeout=config.timeout,
        )
        self.config = config
        self.device = device
        self._pin = pin

    # --- Cabeçalhos ---

    def _headers(self, credentials: Optional[SessionCredentials] = None,
                 verify_password: bool = False) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "X-Browser-Application": self.config.browser_application,
            "X-Client-Version": self.config.client_version,
            "X-Device-Id": self.device.value,
            "X-Device-Model": self.config.user_agent,
            "User-Agent": self.config.user_agent,
        }
        if verify_password or self.config.verify_password_always:
            headers["X-Verify-Password"] = self._pin

        if credentials is not None:
            headers["X-Api-Authorization"] = credentials.credentials
            headers["Cookie"] = (
                f"credentials={credentials.credentials};"
                f"refresh-token={credentials.refresh_token}"
            )
        return headers

    def _json(self, method: str, endpoint: str, credentials: SessionCredentials,
              body: Optional[Dict[str, Any]] = None) -> Any:
        response = self._request(
            method, endpoint,
            headers=self._headers(credentials),
            json=body,
        )
        return self._parse_json(response, context={"endpoint": endpoint})

    # --- Login ---

    def sign_in(self, phone: str) -> Dict[str, Any]:
        """`POST /signin` → `{tokenId}`."""
        response = self._request(
            "POST", ENDPOINTS["signin"],
            headers=self._headers(verify_password=True),
            json={"phone": phone, "password": self._pin, "channel": SIGNIN_CHANNEL},
        )
        return self._parse_json(response, context={"endpoint": ENDPOINTS["signin"]}) or {}

    def request_token(self, phone: str, token_id: str) -> Tuple[Dict[str, Any], List[str]]:
        """
        `POST /token` durante o polling de consentimento.

        Returns:
            Tuple: (payload, cookies) onde cookies são os valores de
            `credentials` e `refresh-token` extraídos dos dois primeiros
            `Set-Cookie`, na ordem

        Raises:
            BackendErrorException: Consentimento pendente ou rejeitado
                (`payload` traz `{code, message}`)
        """
        response = self._request(
            "POST", ENDPOINTS["token"],
            headers=self._headers(verify_password=True),
            json={"phone": phone, "password": self._pin, "tokenId": token_id},
        )
        payload = self._parse_json(response, context={"endpoint": ENDPOINTS["token"]})
        if not isinstance(payload, dict):
            raise InvalidAPIResponseException(
                "Resposta de token com formato inválido",
                details={"type": type(payload).__name__},
            )

        cookies = [cookie_value(h) for h in self._set_cookie_headers(response)[:2]]
        return payload, cookies

    def refresh_token(self, user_id: str, refresh_code: str,
                      credentials: SessionCredentials) -> Any:
        """`PUT /token` com `{userId, refreshCode}`."""
        return self._json(
            "PUT", ENDPOINTS["token"], credentials,
            body={"userId": user_id, "refreshCode": refresh_code},
        )

    # --- Cartões ---

    def list_cards(self, credentials: SessionCredentials) -> Any:
        return self._json("GET", ENDPOINTS["cards"], credentials)

    def get_card(self, credentials: SessionCredentials, card_id: str) -> Any:
        return self._json("GET", ENDPOINTS["card"].format(card_id=card_id), credentials)

    def issue_card(self, credentials: SessionCredentials, design: str,
                   disposable: bool, label: str) -> Any:
        return self._json(
            "POST", ENDPOINTS["issue"], credentials,
            body={"design": design, "disposable": disposable, "label": label},
        )

    def delete_card(self, credentials: SessionCredentials, card_id: str) -> Any:
        return self._json("DELETE", ENDPOINTS["card"].format(card_id=card_id), credentials)
