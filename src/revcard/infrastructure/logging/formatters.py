"""
Formatadores de log: console, texto para arquivo e JSON.

Valores de chaves sensíveis (PIN, tokens, credenciais) saem como `***`.
"""

from __future__ import annotations

import json
import traceback
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from revcard.config.constants import LEVEL_NAMES, SENSITIVE_KEYS

LOCATION_KEYS = ("file", "line", "function")


def is_sensitive(key: str) -> bool:
    """Verifica se a chave de contexto carrega um segredo."""
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def mask_context(context: Dict[str, Any]) -> Dict[str, Any]:
    """Cópia do contexto com valores sensíveis ocultados."""
    return {k: ("***" if is_sensitive(k) and v else v) for k, v in context.items()}


def split_context(context: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Separa localização do chamador e demais chaves (já mascaradas)."""
    location = {k: context[k] for k in LOCATION_KEYS if context.get(k)}
    extra = {k: v for k, v in mask_context(context).items() if k not in LOCATION_KEYS}
    return location, extra


def format_traceback(exception: BaseException) -> str:
    return "".join(traceback.format_exception(
        type(exception), exception, exception.__traceback__
    )).rstrip()


class LogFormatter(ABC):
    """Interface base para formatadores de log."""

    @abstractmethod
    def format(
        self,
        level: int,
        message: str,
        timestamp: datetime,
        context: Dict[str, Any],
        exception: Optional[BaseException] = None
    ) -> str:
        """Formata um registro já filtrado pelo handler."""


class ConsoleFormatter(LogFormatter):
    """
    Linha curta para o terminal: `HH:MM:SS NÍVEL | mensagem | chave=valor`.

    O `correlation_id` fica de fora no console; só os arquivos o registram.
    """

    COLORS = {
        10: "\033[90m",   # DEBUG
        20: "\033[94m",   # INFO
        25: "\033[92m",   # SUCCESS
        30: "\033[93m",   # WARNING
        40: "\033[91m",   # ERROR
        50: "\033[95m",   # CRITICAL
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, show_location: bool = False):
        self.use_colors = use_colors
        self.show_location = show_location

    def format(self, level, message, timestamp, context, exception=None) -> str:
        level_name = LEVEL_NAMES.get(level, "UNKNOWN").ljust(8)
        if self.use_colors:
            level_name = f"{self.COLORS.get(level, '')}{level_name}{self.RESET}"

        line = f"{timestamp:%H:%M:%S} {level_name}"

        location, extra = split_context(context)
        if self.show_location and location:
            line += " [" + ":".join(str(v) for v in location.values()) + "]"

        line += f" | {message}"

        extra.pop("correlation_id", None)
        if extra:
            line += " | " + ", ".join(f"{k}={self._short(v)}" for k, v in extra.items())

        if exception:
            line += "\n" + format_traceback(exception)
        return line

    @staticmethod
    def _short(value: Any) -> str:
        text = str(value)
        return text if len(text) <= 50 else text[:47] + "..."


class FileFormatter(LogFormatter):
    """Texto simples separado por ` | `, com localização e contexto completo."""

    def format(self, level, message, timestamp, context, exception=None) -> str:
        location, extra = split_context(context)
        parts = [
            timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
            LEVEL_NAMES.get(level, "UNKNOWN").ljust(8),
        ]
        if location:
            parts.append(":".join(str(v) for v in location.values()))
        parts.append(message)
        if extra:
            parts.append("[" + ", ".join(f"{k}={v}" for k, v in extra.items()) + "]")

        result = " | ".join(parts)
        if exception:
            result += "\n" + format_traceback(exception)
        return result


class JSONFormatter(LogFormatter):
    """Um objeto JSON por linha."""

    def format(self, level, message, timestamp, context, exception=None) -> str:
        location, extra = split_context(context)
        entry: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "level": level,
            "level_name": LEVEL_NAMES.get(level, "UNKNOWN"),
            "message": message,
        }
        if location:
            entry["location"] = location
        if extra:
            entry["context"] = extra
        if exception:
            entry["exception"] = {"type": type(exception).__name__, "message": str(exception)}
        return json.dumps(entry, default=str, ensure_ascii=False)
