"""
Sistema de logging do Revcard.

Use `get_logger()` para obter o logger global e `configure_logging()`
para recriá-lo a partir de uma LoggerConfig (a CLI faz isso na partida).
"""

from typing import Optional

from revcard.config import LoggerConfig
from .logger import RevcardLogger, ScopedLogger
from .context import LogContext, context_scope, get_context
from .formatters import LogFormatter, mask_context
from .handlers import LogHandler

# Singleton do logger principal
_logger_instance: Optional[RevcardLogger] = None


def get_logger() -> RevcardLogger:
    """Retorna a instância singleton do logger."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = RevcardLogger()
    return _logger_instance


def configure_logging(config: LoggerConfig) -> RevcardLogger:
    """Substitui o logger global por um novo construído a partir de `config`."""
    global _logger_instance
    if _logger_instance is not None:
        _logger_instance.close()
    _logger_instance = RevcardLogger(config)
    return _logger_instance


__all__ = [
    "LoggerConfig",
    "RevcardLogger",
    "ScopedLogger",
    "LogContext",
    "LogFormatter",
    "LogHandler",
    "context_scope",
    "get_context",
    "mask_context",
    "get_logger",
    "configure_logging",
]
