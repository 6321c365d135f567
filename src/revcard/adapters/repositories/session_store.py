"""
Implementações do repositório de sessão.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from revcard.core.exceptions import SessionException
from revcard.core.interfaces import SessionStore
from revcard.core.models import PersistedSession
from revcard.infrastructure.logging import get_logger


class InMemorySessionStore(SessionStore):
    """
    Implementação em memória (não persistente entre reinícios).
    Útil para testes ou execuções locais simples.
    """

    def __init__(self, session: Optional[PersistedSession] = None):
        self._session = session
        self.saves = 0

    def load(self) -> Optional[PersistedSession]:
        return self._session

    def save(self, session: PersistedSession) -> None:
        self._session = session
        self.saves += 1

    def clear(self) -> None:
        self._session = None


class JsonFileSessionStore(SessionStore):
    """
    Sessão gravada num documento JSON.

    O documento também guarda `phoneNumber` e `cardId` da CLI; a sessão fica
    sob a chave `tokens` e as demais chaves são preservadas em cada escrita.
    """

    TOKENS_KEY = "tokens"

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self.logger = get_logger().com_contexto(arquivo=str(self.path))

    # --- Documento ---

    def read_document(self) -> Dict[str, Any]:
        """
        Lê o documento inteiro (vazio se o arquivo não existir).

        Raises:
            SessionException: Se o arquivo não for um objeto JSON
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SessionException(f"Erro ao ler {self.path}", cause=e) from e

        if not isinstance(data, dict):
            raise SessionException(
                f"Arquivo {self.path} deve conter um objeto JSON",
                details={"type": type(data).__name__},
            )
        return data

    def write_document(self, data: Dict[str, Any]) -> None:
        """Substitui o documento de forma atômica."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=4)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise SessionException(f"Erro ao gravar {self.path}", cause=e) from e

    def get_value(self, key: str, default: Any = None) -> Any:
        return self.read_document().get(key, default)

    def set_value(self, key: str, value: Any) -> None:
        with self._lock:
            data = self.read_document()
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
            self.write_document(data)

    # --- SessionStore ---

    def load(self) -> Optional[PersistedSession]:
        raw = self.read_document().get(self.TOKENS_KEY)
        if not raw:
            return None
        try:
            return PersistedSession.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise SessionException("Sessão gravada incompleta", cause=e) from e

    def save(self, session: PersistedSession) -> None:
        self.set_value(self.TOKENS_KEY, session.to_dict())
        self.logger.debug("Sessão gravada")

    def clear(self) -> None:
        self.set_value(self.TOKENS_KEY, None)
        self.logger.info("Sessão removida")
