"""Testes dos repositórios de sessão."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from revcard.adapters.repositories import InMemorySessionStore, JsonFileSessionStore
from revcard.core.exceptions import SessionException
from tests.fakes import stored_session


class TestJsonFileSessionStore(unittest.TestCase):
    """Documento JSON com `phoneNumber`, `cardId` e `tokens`."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "revolut.json"
        self.store = JsonFileSessionStore(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_arquivo_inexistente_nao_tem_sessao(self) -> None:
        self.assertIsNone(self.store.load())

    def test_save_grava_sob_tokens_e_preserva_outras_chaves(self) -> None:
        self.path.write_text(json.dumps({"phoneNumber": "+15551234", "cardId": "c1"}), encoding="utf-8")

        self.store.save(stored_session())

        dados = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(dados["phoneNumber"], "+15551234")
        self.assertEqual(dados["cardId"], "c1")
        self.assertEqual(set(dados["tokens"]), {"credentials", "refreshToken", "deviceId", "data"})

    def test_load_reconstroi_sessao(self) -> None:
        sessao = stored_session()
        self.store.save(sessao)
        self.assertEqual(JsonFileSessionStore(self.path).load(), sessao)

    def test_clear_remove_apenas_tokens(self) -> None:
        self.store.set_value("phoneNumber", "+15551234")
        self.store.save(stored_session())

        self.store.clear()

        self.assertIsNone(self.store.load())
        self.assertEqual(self.store.get_value("phoneNumber"), "+15551234")

    def test_json_invalido(self) -> None:
        self.path.write_text("{nao-json", encoding="utf-8")
        with self.assertRaises(SessionException):
            self.store.load()

    def test_documento_que_nao_e_objeto(self) -> None:
        self.path.write_text("[]", encoding="utf-8")
        with self.assertRaises(SessionException):
            self.store.read_document()

    def test_sessao_incompleta(self) -> None:
        self.path.write_text(json.dumps({"tokens": {"credentials": "x"}}), encoding="utf-8")
        with self.assertRaises(SessionException):
            self.store.load()


class TestInMemorySessionStore(unittest.TestCase):

    def test_ciclo_basico(self) -> None:
        store = InMemorySessionStore()
        self.assertIsNone(store.load())
        store.save(stored_session())
        self.assertEqual(store.saves, 1)
        store.clear()
        self.assertIsNone(store.load())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
