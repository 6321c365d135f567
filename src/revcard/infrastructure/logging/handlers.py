"""
Destinos dos logs: console e arquivo.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .formatters import ConsoleFormatter, FileFormatter, LogFormatter


class LogHandler(ABC):
    """Filtra por nível, formata e escreve um registro."""

    def __init__(self, formatter: LogFormatter, level: int = 0):
        self.formatter = formatter
        self.level = level
        self._lock = threading.RLock()

    @abstractmethod
    def emit(self, record: Dict[str, Any]) -> None:
        """Escreve o registro no destino."""

    def format(self, record: Dict[str, Any]) -> str:
        return self.formatter.format(
            level=record['level'],
            message=record['message'],
            timestamp=record['timestamp'],
            context=record.get('context', {}),
            exception=record.get('exception'),
        )

    def handle(self, record: Dict[str, Any]) -> None:
        if record.get('level', 0) < self.level:
            return
        try:
            with self._lock:
                self.emit(record)
        except (OSError, ValueError) as e:
            # Falha de escrita não pode derrubar a operação logada
            print(f"Erro no handler: {e}", file=sys.stderr)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class ConsoleHandler(LogHandler):
    """
    Escreve no console.

    Sem `stream` explícito, usa o `sys.stderr` vigente a cada escrita, de modo
    que trocas de stderr (ex.: CliRunner) não deixam o handler preso a um
    stream já fechado.
    """

    def __init__(self, stream: Optional[TextIO] = None,
                 formatter: Optional[LogFormatter] = None, level: int = 0):
        super().__init__(formatter or ConsoleFormatter(), level)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def emit(self, record: Dict[str, Any]) -> None:
        stream = self.stream
        stream.write(self.format(record) + '\n')
        stream.flush()

    def flush(self) -> None:
        stream = self.stream
        if stream is None or getattr(stream, 'closed', False):
            return
        stream.flush()


class FileHandler(LogHandler):
    """Anexa (ou sobrescreve, com `mode='w'`) um arquivo de log."""

    def __init__(self, filename: str | Path, formatter: Optional[LogFormatter] = None,
                 level: int = 0, mode: str = 'a', encoding: str = 'utf-8'):
        super().__init__(formatter or FileFormatter(), level)
        self.filename = Path(filename)
        self.filename.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[TextIO] = open(self.filename, mode, encoding=encoding)

    def emit(self, record: Dict[str, Any]) -> None:
        if self._file is None:
            raise ValueError(f"Handler de {self.filename} já foi fechado")
        self._file.write(self.format(record) + '\n')
        self._file.flush()

    def flush(self) -> None:
        if self._file is not None and not self._file.closed:
            self._file.flush()

    def close(self) -> None:
        super().close()
        if self._file is not None:
            self._file.close()
            self._file = None
