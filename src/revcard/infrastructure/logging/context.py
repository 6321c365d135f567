"""
Contexto dos logs, um por thread.

Cada thread ganha um `correlation_id` próprio; `context_scope` acrescenta
chaves temporárias (ex.: `operation` dentro de `etapa`).
"""

from __future__ import annotations

import contextlib
import inspect
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict
from uuid import uuid4

# Frames destes arquivos nunca são o "chamador" de um log
_SKIPPED_DIRS = {os.path.dirname(os.path.abspath(__file__))}
_SKIPPED_FILES = {os.path.abspath(contextlib.__file__)}


@dataclass
class LogContext:
    """
    Contexto de execução anexado a cada registro.

    Attributes:
        correlation_id: Correlaciona os registros da mesma thread
        metadata: Chaves adicionadas por `scope`
    """

    correlation_id: str = field(default_factory=lambda: uuid4().hex[:8])
    metadata: Dict[str, Any] = field(default_factory=dict)

    @contextmanager
    def scope(self, **kwargs: Any):
        """Acrescenta chaves enquanto o bloco executa e restaura as anteriores."""
        previous = dict(self.metadata)
        self.metadata.update({k: v for k, v in kwargs.items() if v is not None})
        try:
            yield self
        finally:
            self.metadata = previous

    def to_dict(self) -> Dict[str, Any]:
        return {"correlation_id": self.correlation_id, **self.metadata}


def caller_info() -> Dict[str, Any]:
    """Arquivo, linha e função do primeiro frame fora do pacote de logging."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = os.path.abspath(frame.f_code.co_filename)
            if os.path.dirname(filename) not in _SKIPPED_DIRS and filename not in _SKIPPED_FILES:
                return {
                    "file": os.path.basename(filename),
                    "line": frame.f_lineno,
                    "function": frame.f_code.co_name,
                }
            frame = frame.f_back
        return {}
    finally:
        del frame


_local = threading.local()


def get_context() -> LogContext:
    """Contexto da thread atual (criado no primeiro uso)."""
    ctx = getattr(_local, "context", None)
    if ctx is None:
        ctx = _local.context = LogContext()
    return ctx


@contextmanager
def context_scope(**kwargs: Any):
    """Escopo temporário no contexto da thread atual."""
    with get_context().scope(**kwargs) as ctx:
        yield ctx
