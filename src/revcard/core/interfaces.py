"""
Interfaces do Núcleo (Core Interfaces).

Define os contratos (Ports) que os Adapters devem implementar.
"""

from abc import ABC, abstractmethod
from typing import Optional

from revcard.core.models import PersistedSession


class SessionStore(ABC):
    """
    Interface para persistência da sessão autenticada.

    Leitura e escrita são operações separadas. Implementações não precisam
    suportar escritores concorrentes.
    """

    @abstractmethod
    def load(self) -> Optional[PersistedSession]:
        """Retorna a sessão gravada ou None se não houver."""
        ...

    @abstractmethod
    def save(self, session: PersistedSession) -> None:
        """Grava (substitui) a sessão."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove a sessão gravada."""
        ...
