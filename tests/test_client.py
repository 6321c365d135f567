"""Cenários ponta a ponta do BankClient e das operações de cartão."""

from __future__ import annotations

import unittest

from revcard.adapters.repositories import InMemorySessionStore
from revcard.client import BankClient, normalize_phone
from revcard.core.exceptions import CardNotFoundError, InvalidAPIResponseException
from revcard.core.services.crypto import encode_credentials, encode_refresh
from tests.fakes import (
    ACCESS_TOKEN,
    NOW,
    PIN,
    USER_ID,
    FakeResponse,
    FakeSession,
    card_detail,
    make_config,
    quiet_logger,
    stored_session,
    token_payload,
)

COOKIES = ["credentials=Y3JlZHM=; Path=/", "refresh-token=cmVm=; Path=/"]
PENDING = FakeResponse(401, {"code": 9035, "message": "consent pending"})


class TestFullScenario(unittest.TestCase):
    """Login do zero até a leitura do PAN decifrado."""

    def test_login_com_consentimento_e_leitura_do_pan(self) -> None:
        http = FakeSession()
        http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        http.add("POST", "/token", PENDING, PENDING,
                 FakeResponse(200, token_payload(expiry=NOW + 3_600_000), set_cookies=COOKIES))
        http.add("GET", "/card/c1", FakeResponse(200, card_detail("4111111111111111")))
        store = InMemorySessionStore()

        client = BankClient("+1 5551234", PIN, store, config=make_config(),
                            http_session=http, clock=lambda: NOW, logger=quiet_logger())
        client.sign_in()

        salvo = store.load()
        self.assertEqual(salvo.token.access_token, ACCESS_TOKEN)
        self.assertEqual(salvo.token.user_id, USER_ID)
        self.assertEqual(salvo.credentials.credentials, "Y3JlZHM=")
        self.assertEqual(salvo.credentials.refresh_token, "cmVm=")
        self.assertEqual(http.count("POST", "/token"), 3)

        secrets = client.get_card_secrets("c1")

        self.assertEqual(secrets.pan, "4111111111111111")
        self.assertEqual(secrets.cvv, "123")
        self.assertEqual(secrets.expiry.formatted(), "03/27")
        # Token válido: nenhum refresh
        self.assertEqual(http.count("PUT", "/token"), 0)


class TestCardOperations(unittest.TestCase):
    """Operações de cartão sobre uma sessão retomada."""

    def setUp(self) -> None:
        self.http = FakeSession()

    def _client(self, expiry=NOW + 3_600_000, **api):
        config = make_config()
        for key, value in api.items():
            setattr(config.api, key, value)
        self.store = InMemorySessionStore(stored_session(expiry=expiry, device_id="dev-1"))
        client = BankClient(None, PIN, self.store, config=config,
                            http_session=self.http, clock=lambda: NOW, logger=quiet_logger())
        client.sign_in()
        return client

    def test_sessao_expirada_faz_um_refresh_antes_do_pedido(self) -> None:
        now = [NOW]
        store = InMemorySessionStore(stored_session(expiry=NOW + 10))
        client = BankClient(None, PIN, store, config=make_config(),
                            http_session=self.http, clock=lambda: now[0], logger=quiet_logger())
        client.sign_in()
        self.assertEqual(self.http.calls, [])

        now[0] = NOW + 10
        self.http.add("PUT", "/token", FakeResponse(200, token_payload(expiry=NOW + 3_600_000)))
        self.http.add("GET", "/cards", FakeResponse(200, []))
        client.list_cards()
        client.list_cards()

        self.assertEqual(self.http.paths(), ["PUT /token", "GET /cards", "GET /cards"])

    def test_cabecalhos_autenticados(self) -> None:
        self.http.add("GET", "/cards", FakeResponse(200, []))
        self._client().list_cards()

        headers = self.http.calls[0]["headers"]
        creds = encode_credentials(USER_ID, ACCESS_TOKEN)
        self.assertEqual(headers["X-Api-Authorization"], creds)
        self.assertEqual(headers["Cookie"], f"credentials={creds};refresh-token={encode_refresh('RT')}")
        self.assertEqual(headers["X-Device-Id"], "dev-1")
        self.assertEqual(headers["X-Browser-Application"], "BROWSER_EXTENSION")
        self.assertEqual(headers["X-Client-Version"], "100.0")
        self.assertEqual(headers["X-Device-Model"], headers["User-Agent"])
        self.assertEqual(headers["X-Verify-Password"], PIN)

    def test_pin_omitido_quando_desligado(self) -> None:
        self.http.add("GET", "/cards", FakeResponse(200, []))
        self._client(verify_password_always=False).list_cards()
        self.assertNotIn("X-Verify-Password", self.http.calls[0]["headers"])

    def test_lista_de_cartoes(self) -> None:
        self.http.add("GET", "/cards", FakeResponse(200, [
            {"id": "c1", "virtual": False, "disposable": False, "state": "ACTIVE"},
            {"id": "c2", "virtual": True, "disposable": True, "state": "ACTIVE", "lastFour": "4242"},
        ]))
        cards = self._client().list_cards()
        self.assertEqual([c.id for c in cards], ["c1", "c2"])
        self.assertEqual(cards[1].last_four, "4242")

    def test_lista_com_formato_invalido(self) -> None:
        self.http.add("GET", "/cards", FakeResponse(200, {"erro": True}))
        with self.assertRaises(InvalidAPIResponseException):
            self._client().list_cards()

    def test_segredos_ausentes(self) -> None:
        self.http.add("GET", "/card/c9", FakeResponse(200, {"id": "c9", "pan": "abc"}))
        with self.assertRaises(CardNotFoundError):
            self._client().get_card_secrets("c9")

    def test_get_card_nao_decifra(self) -> None:
        detalhe = card_detail()
        self.http.add("GET", "/card/c1", FakeResponse(200, detalhe))
        card = self._client().get_card("c1")
        self.assertEqual(card.pan, detalhe["pan"])

    def test_emite_descartavel(self) -> None:
        self.http.add("POST", "/card/issue", FakeResponse(200, {"id": "novo", "virtual": True, "disposable": True}))
        card = self._client().create_disposable_card()

        self.assertEqual(card.id, "novo")
        self.assertEqual(self.http.calls[0]["json"],
                         {"design": "LIGHT_GREEN_VIRTUAL", "disposable": True, "label": "Disposable"})

    def test_emite_virtual_comum(self) -> None:
        self.http.add("POST", "/card/issue", FakeResponse(200, {"id": "v1", "virtual": True}))
        self._client().create_virtual_card("Assinaturas", design="LIGHT_BLUE_VIRTUAL")
        self.assertEqual(self.http.calls[0]["json"],
                         {"design": "LIGHT_BLUE_VIRTUAL", "disposable": False, "label": "Assinaturas"})

    def test_exclui_cartao(self) -> None:
        self.http.add("DELETE", "/card/c1", FakeResponse(200, {"id": "c1", "state": "TERMINATED"}))
        card = self._client().delete_card("c1")
        self.assertEqual(card.state, "TERMINATED")

    def test_reaproveita_descartavel_existente(self) -> None:
        self.http.add("GET", "/cards", FakeResponse(200, [
            {"id": "c1", "disposable": False},
            {"id": "c2", "virtual": True, "disposable": True},
        ]))
        self.assertEqual(self._client().find_or_create_disposable_card(True), "c2")
        self.assertEqual(self.http.count("POST", "/card/issue"), 0)

    def test_cria_quando_nao_ha_descartavel(self) -> None:
        self.http.add("GET", "/cards", FakeResponse(200, [{"id": "c1", "disposable": False}]))
        self.http.add("POST", "/card/issue", FakeResponse(200, {"id": "novo", "disposable": True}))
        self.assertEqual(self._client().find_or_create_disposable_card(True), "novo")

    def test_sempre_cria_sem_listar(self) -> None:
        self.http.add("POST", "/card/issue", FakeResponse(200, {"id": "novo", "disposable": True}))
        self.assertEqual(self._client().find_or_create_disposable_card(False), "novo")
        self.assertEqual(self.http.count("GET", "/cards"), 0)


class TestNormalizePhone(unittest.TestCase):

    def test_remove_espacos(self) -> None:
        self.assertEqual(normalize_phone(" +1 555 1234 "), "+15551234")

    def test_vazio_vira_none(self) -> None:
        self.assertIsNone(normalize_phone("   "))
        self.assertIsNone(normalize_phone(None))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
