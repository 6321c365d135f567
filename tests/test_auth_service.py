"""Testes da máquina de estados de autenticação."""

from __future__ import annotations

import threading
import unittest

from revcard.adapters.repositories import InMemorySessionStore
from revcard.client import BankClient
from revcard.core.exceptions import (
    ConsentTimeoutOrRejected,
    InvalidAPIResponseException,
    MissingPhoneNumberError,
    NeedsReauthenticationError,
    SignInRejectedError,
)
from revcard.core.services import AuthState
from tests.fakes import (
    NOW,
    PIN,
    FakeResponse,
    FakeSession,
    make_config,
    quiet_logger,
    stored_session,
    token_payload,
)

COOKIES = ["credentials=Y3JlZHM=; Path=/; HttpOnly", "refresh-token=cmVmcmVzaA==; Path=/"]
PENDING = FakeResponse(401, {"code": 9035, "message": "consent pending"})


class RecordingStore(InMemorySessionStore):
    """Guarda quantas chamadas de token existiam no momento de cada save."""

    def __init__(self, http: FakeSession, session=None):
        super().__init__(session)
        self.http = http
        self.token_calls_at_save = []

    def save(self, session) -> None:
        self.token_calls_at_save.append(self.http.count("POST", "/token"))
        super().save(session)


class TestSignIn(unittest.TestCase):
    """Login completo com polling de consentimento."""

    def setUp(self) -> None:
        self.http = FakeSession()
        self.store = RecordingStore(self.http)

    def _client(self, phone="+1 5551234", **auth):
        return BankClient(phone, PIN, self.store, config=make_config(**auth),
                          http_session=self.http, clock=lambda: NOW, logger=quiet_logger())

    def test_token_imediato_autentica_e_persiste(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", FakeResponse(200, token_payload(), set_cookies=COOKIES))
        client = self._client()

        self.assertEqual(client.sign_in(), AuthState.AUTHENTICATED)

        salvo = self.store.load()
        self.assertTrue(salvo.credentials.is_complete)
        self.assertEqual(salvo.credentials.credentials, "Y3JlZHM=")
        self.assertEqual(salvo.credentials.device_id, client.device_id)

    def test_n_pendentes_fazem_n_mais_um_pedidos(self) -> None:
        n = 3
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", *([PENDING] * n),
                      FakeResponse(200, token_payload(), set_cookies=COOKIES))

        self._client().sign_in()

        self.assertEqual(self.http.count("POST", "/token"), n + 1)
        # Nada gravado antes da resposta final
        self.assertEqual(self.store.token_calls_at_save, [n + 1])

    def test_corpo_dos_pedidos_de_login(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", FakeResponse(200, token_payload(), set_cookies=COOKIES))

        self._client().sign_in()

        signin, token = self.http.calls
        self.assertEqual(signin["json"], {"phone": "+15551234", "password": PIN, "channel": "APP"})
        self.assertEqual(token["json"], {"phone": "+15551234", "password": PIN, "tokenId": "abc"})
        self.assertEqual(signin["headers"]["X-Verify-Password"], PIN)

    def test_codigo_diferente_de_pendente_rejeita(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", PENDING, FakeResponse(401, {"code": 9001, "message": "invalid"}))
        client = self._client()

        with self.assertRaises(ConsentTimeoutOrRejected) as ctx:
            client.sign_in()

        self.assertEqual(ctx.exception.reason, "rejected")
        self.assertEqual(ctx.exception.payload["code"], 9001)
        self.assertEqual(client.state, AuthState.NEEDS_REAUTHENTICATION)
        self.assertIsNone(self.store.load())

    def test_resposta_sem_expiracao_nem_codigo_rejeita(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", FakeResponse(200, {"message": "?"}))

        with self.assertRaises(ConsentTimeoutOrRejected):
            self._client().sign_in()

    def test_limite_de_tentativas(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", PENDING)
        client = self._client()

        with self.assertRaises(ConsentTimeoutOrRejected) as ctx:
            client.sign_in(max_attempts=2)

        self.assertEqual(ctx.exception.reason, "max_attempts")
        self.assertEqual(self.http.count("POST", "/token"), 2)
        self.assertEqual(client.state, AuthState.NEEDS_REAUTHENTICATION)

    def test_limite_de_tentativas_vindo_da_config(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", PENDING)

        with self.assertRaises(ConsentTimeoutOrRejected):
            self._client(max_poll_attempts=1).sign_in()
        self.assertEqual(self.http.count("POST", "/token"), 1)

    def test_cancelamento(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", PENDING)
        cancel = threading.Event()
        cancel.set()

        with self.assertRaises(ConsentTimeoutOrRejected) as ctx:
            self._client().sign_in(cancel=cancel)

        self.assertEqual(ctx.exception.reason, "cancelled")
        self.assertEqual(self.http.count("POST", "/token"), 0)

    def test_sem_telefone(self) -> None:
        with self.assertRaises(MissingPhoneNumberError):
            self._client(phone=None).sign_in()
        self.assertEqual(self.http.calls, [])

    def test_login_recusado(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(401, {"code": 9001, "message": "invalid"}))

        with self.assertRaises(SignInRejectedError) as ctx:
            self._client().sign_in()
        self.assertEqual(ctx.exception.details["payload"]["code"], 9001)

    def test_token_sem_cookies(self) -> None:
        self.http.add("POST", "/signin", FakeResponse(200, {"tokenId": "abc"}))
        self.http.add("POST", "/token", FakeResponse(200, token_payload()))

        client = self._client()
        with self.assertRaises(InvalidAPIResponseException):
            client.sign_in()
        self.assertIsNone(self.store.load())
        self.assertEqual(client.state, AuthState.NEEDS_REAUTHENTICATION)


class TestResume(unittest.TestCase):
    """Retomada de sessão gravada."""

    def setUp(self) -> None:
        self.http = FakeSession()

    def _client(self, store):
        return BankClient(None, PIN, store, config=make_config(),
                          http_session=self.http, clock=lambda: NOW, logger=quiet_logger())

    def test_retomada_valida_nao_chama_rede(self) -> None:
        client = self._client(InMemorySessionStore(stored_session(device_id="dev-1")))

        self.assertEqual(client.sign_in(), AuthState.AUTHENTICATED)
        self.assertEqual(self.http.calls, [])
        self.assertEqual(client.device_id, "dev-1")

    def test_retomada_expirada_renova(self) -> None:
        self.http.add("PUT", "/token", FakeResponse(200, token_payload(expiry=NOW + 10)))
        client = self._client(InMemorySessionStore(stored_session(expiry=NOW - 1, device_id="dev-1")))

        client.sign_in()

        self.assertEqual(self.http.count("PUT", "/token"), 1)
        self.assertEqual(self.http.calls[0]["headers"]["X-Device-Id"], "dev-1")

    def test_refresh_recusado_e_terminal(self) -> None:
        self.http.add("PUT", "/token", FakeResponse(401, {"code": 9039}))
        store = InMemorySessionStore(stored_session(expiry=NOW - 1))
        client = self._client(store)

        with self.assertRaises(NeedsReauthenticationError):
            client.sign_in()
        self.assertEqual(client.state, AuthState.NEEDS_REAUTHENTICATION)
        # O núcleo não apaga a sessão; isso cabe ao chamador
        self.assertIsNotNone(store.load())

        with self.assertRaises(NeedsReauthenticationError):
            client.sign_in()
        self.assertEqual(self.http.count("PUT", "/token"), 1)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
