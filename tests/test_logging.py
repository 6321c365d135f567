"""Testes do sistema de logging."""

from __future__ import annotations

import io
import json
import unittest
from datetime import datetime
from unittest.mock import patch

from revcard.config import LoggerConfig
from revcard.core.exceptions import InvalidConfigException
from revcard.infrastructure.logging import RevcardLogger, configure_logging, get_logger
from revcard.infrastructure.logging.formatters import ConsoleFormatter, FileFormatter, JSONFormatter
from revcard.infrastructure.logging.handlers import ConsoleHandler, LogHandler


class ListHandler(LogHandler):
    """Handler que apenas acumula os registros."""

    def __init__(self, level: int = 0):
        super().__init__(FileFormatter(), level)
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestFormatters(unittest.TestCase):
    """Valores sensíveis nunca saem em claro."""

    CONTEXT = {"pin": "1234", "credentials": "Y3JlZA==", "card_id": "c1", "file": "x.py", "line": 3}

    def test_file_formatter_mascara_segredos(self) -> None:
        texto = FileFormatter().format(20, "msg", datetime.now(), dict(self.CONTEXT))
        self.assertNotIn("1234", texto)
        self.assertNotIn("Y3JlZA==", texto)
        self.assertIn("card_id=c1", texto)
        self.assertIn("x.py:3", texto)

    def test_json_formatter_mascara_segredos(self) -> None:
        dados = json.loads(JSONFormatter().format(40, "falhou", datetime.now(), dict(self.CONTEXT)))
        self.assertEqual(dados["level_name"], "ERROR")
        self.assertEqual(dados["context"]["pin"], "***")
        self.assertEqual(dados["context"]["card_id"], "c1")
        self.assertEqual(dados["location"], {"file": "x.py", "line": 3})

    def test_console_sem_cores(self) -> None:
        formatter = ConsoleFormatter(use_colors=False)
        texto = formatter.format(25, "ok", datetime(2024, 1, 1, 9, 30), {"pin": "1234", "correlation_id": "abc"})
        self.assertTrue(texto.startswith("09:30:00 SUCCESS"))
        self.assertNotIn("\033", texto)
        self.assertNotIn("abc", texto)
        self.assertNotIn("1234", texto)


class TestRevcardLogger(unittest.TestCase):

    def setUp(self) -> None:
        self.handler = ListHandler()
        self.logger = RevcardLogger(LoggerConfig(nivel_minimo="DEBUG"), handlers=[self.handler])

    def test_contexto_de_escopo(self) -> None:
        self.logger.com_contexto(servico="Auth").info("oi", extra=1)
        contexto = self.handler.records[0]["context"]
        self.assertEqual(contexto["servico"], "Auth")
        self.assertEqual(contexto["extra"], 1)

    def test_etapa_registra_falha_e_relanca(self) -> None:
        with self.assertRaises(ValueError):
            with self.logger.etapa("login"):
                raise ValueError("boom")

        ultimo = self.handler.records[-1]
        self.assertEqual(ultimo["message"], "Falha: login")
        self.assertIsInstance(ultimo["exception"], ValueError)

    def test_nivel_minimo_filtra(self) -> None:
        self.logger.set_level("WARNING")
        self.logger.info("ignorado")
        self.logger.aviso("registrado")
        self.assertEqual([r["message"] for r in self.handler.records], ["registrado"])

    def test_nivel_invalido(self) -> None:
        with self.assertRaises(InvalidConfigException):
            self.logger.set_level("VERBOSO")

    def test_console_handler_escreve_no_stream(self) -> None:
        stream = io.StringIO()
        handler = ConsoleHandler(stream=stream, formatter=ConsoleFormatter(use_colors=False))
        RevcardLogger(LoggerConfig(), handlers=[handler]).sucesso("pronto")
        self.assertIn("pronto", stream.getvalue())

    def test_localizacao_aponta_para_quem_chamou(self) -> None:
        with self.assertRaises(ValueError):
            with self.logger.com_contexto(servico="Auth").etapa("login"):
                raise ValueError("boom")

        for record in self.handler.records:
            self.assertEqual(record["context"]["file"], "test_logging.py")


class TestConsoleStream(unittest.TestCase):
    """O handler de console não pode quebrar quando o stderr antigo é fechado."""

    def tearDown(self) -> None:
        configure_logging(LoggerConfig(usar_cores=False))

    def test_flush_ignora_stream_fechado(self) -> None:
        stream = io.StringIO()
        handler = ConsoleHandler(stream=stream)
        stream.close()

        handler.flush()
        handler.close()

    def test_reconfigurar_apos_stderr_fechado(self) -> None:
        primeiro = io.StringIO()
        with patch("sys.stderr", primeiro):
            configure_logging(LoggerConfig(usar_cores=False))
            get_logger().info("primeira")
        self.assertIn("primeira", primeiro.getvalue())
        primeiro.close()

        segundo = io.StringIO()
        with patch("sys.stderr", segundo):
            logger = configure_logging(LoggerConfig(usar_cores=False))
            logger.info("segunda")

        self.assertIn("segunda", segundo.getvalue())

    def test_console_segue_stderr_atual(self) -> None:
        handler = ConsoleHandler(formatter=ConsoleFormatter(use_colors=False))
        logger = RevcardLogger(LoggerConfig(), handlers=[handler])

        capturado = io.StringIO()
        with patch("sys.stderr", capturado):
            logger.aviso("atual")

        self.assertIn("atual", capturado.getvalue())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
