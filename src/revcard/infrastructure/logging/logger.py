"""
Logger principal do Revcard.

Verbos em português usados em todo o projeto:
debug/info/sucesso/aviso/erro/critico.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from revcard.config.constants import LEVEL_VALUES
from revcard.config.models import LoggerConfig
from revcard.core.exceptions import InvalidConfigException

from .context import caller_info, context_scope, get_context
from .formatters import ConsoleFormatter, FileFormatter, JSONFormatter
from .handlers import ConsoleHandler, FileHandler, LogHandler

ERROR_LOG_NAME = "revcard_errors.log"


class RevcardLogger:
    """
    Distribui cada registro para os handlers configurados.

    Com `handlers` explícito a configuração de destinos é ignorada.
    """

    def __init__(self, config: Optional[LoggerConfig] = None,
                 handlers: Optional[List[LogHandler]] = None):
        self.config = config or LoggerConfig()
        self.config.validate()
        self.handlers: List[LogHandler] = list(handlers) if handlers is not None else self._build_handlers()

    def _build_handlers(self) -> List[LogHandler]:
        level = LEVEL_VALUES[self.config.nivel_minimo]
        handlers: List[LogHandler] = [ConsoleHandler(
            formatter=ConsoleFormatter(
                use_colors=self.config.usar_cores,
                show_location=self.config.mostrar_localizacao,
            ),
            level=level,
        )]

        if self.config.arquivo_log:
            handlers.append(FileHandler(
                self.config.arquivo_log,
                formatter=JSONFormatter() if self.config.formato_json else FileFormatter(),
                level=level,
                mode='w' if self.config.sobrescrever_arquivo else 'a',
            ))

        if self.config.diretorio_erros:
            handlers.append(FileHandler(
                self.config.diretorio_erros / ERROR_LOG_NAME,
                level=LEVEL_VALUES["ERROR"],
            ))
        return handlers

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        exception = kwargs.pop('exception', None)
        if kwargs.pop('exc_info', False) and exception is None:
            exception = sys.exc_info()[1]

        record: Dict[str, Any] = {
            'timestamp': datetime.now(),
            'level': LEVEL_VALUES[level],
            'message': message,
            'context': {**get_context().to_dict(), **caller_info(), **kwargs},
        }
        if exception is not None:
            record['exception'] = exception

        for handler in self.handlers:
            handler.handle(record)

    def debug(self, mensagem: str, **dados: Any) -> None:
        self._log("DEBUG", mensagem, **dados)

    def info(self, mensagem: str, **dados: Any) -> None:
        self._log("INFO", mensagem, **dados)

    def sucesso(self, mensagem: str, **dados: Any) -> None:
        self._log("SUCCESS", mensagem, **dados)

    def aviso(self, mensagem: str, **dados: Any) -> None:
        self._log("WARNING", mensagem, **dados)

    def erro(self, mensagem: str, **dados: Any) -> None:
        """Registra um erro, anexando a exceção corrente se houver."""
        dados.setdefault('exc_info', True)
        self._log("ERROR", mensagem, **dados)

    def critico(self, mensagem: str, **dados: Any) -> None:
        dados.setdefault('exc_info', True)
        self._log("CRITICAL", mensagem, **dados)

    def com_contexto(self, **dados: Any) -> "ScopedLogger":
        """Logger derivado que acrescenta `dados` a todo registro."""
        return ScopedLogger(self, dados)

    @contextmanager
    def etapa(self, titulo: str, **dados: Any):
        """
        Registra início e fim de uma operação em DEBUG e a falha em ERROR.

        A exceção é sempre relançada; dentro do bloco o contexto ganha
        `operation=titulo`.
        """
        self.debug(f"Iniciando: {titulo}", **dados)
        try:
            with context_scope(operation=titulo):
                yield
        except Exception as e:
            self.erro(f"Falha: {titulo}", exception=e, **dados)
            raise
        self.debug(f"Concluído: {titulo}", **dados)

    def set_level(self, level: str) -> None:
        """
        Define o nível mínimo de todos os handlers.

        Raises:
            InvalidConfigException: Se o nível não existir
        """
        level_value = LEVEL_VALUES.get(level.upper())
        if level_value is None:
            raise InvalidConfigException(f"Nível inválido: {level}", details={"level": level})

        self.config.nivel_minimo = level.upper()
        for handler in self.handlers:
            handler.level = level_value

    def close(self) -> None:
        for handler in self.handlers:
            handler.close()
        self.handlers.clear()


class ScopedLogger:
    """Wrapper que adiciona contexto fixo a todas as mensagens."""

    def __init__(self, parent: RevcardLogger, context: Dict[str, Any]):
        self.parent = parent
        self.context = context

    def _merge(self, dados: Dict[str, Any]) -> Dict[str, Any]:
        return {**self.context, **dados}

    def debug(self, mensagem: str, **dados: Any) -> None:
        self.parent.debug(mensagem, **self._merge(dados))

    def info(self, mensagem: str, **dados: Any) -> None:
        self.parent.info(mensagem, **self._merge(dados))

    def sucesso(self, mensagem: str, **dados: Any) -> None:
        self.parent.sucesso(mensagem, **self._merge(dados))

    def aviso(self, mensagem: str, **dados: Any) -> None:
        self.parent.aviso(mensagem, **self._merge(dados))

    def erro(self, mensagem: str, **dados: Any) -> None:
        self.parent.erro(mensagem, **self._merge(dados))

    def critico(self, mensagem: str, **dados: Any) -> None:
        self.parent.critico(mensagem, **self._merge(dados))

    def com_contexto(self, **dados: Any) -> "ScopedLogger":
        return ScopedLogger(self.parent, self._merge(dados))

    @contextmanager
    def etapa(self, titulo: str, **dados: Any):
        with self.parent.etapa(titulo, **self._merge(dados)):
            yield
