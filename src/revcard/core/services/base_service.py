"""
Classe base para serviços.
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Optional


class BaseService(ABC):
    """Serviço do núcleo com logger escopado pelo nome da classe."""

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or self._get_default_logger()

    def _get_default_logger(self) -> Any:
        from revcard.infrastructure.logging import get_logger
        return get_logger().com_contexto(servico=self.__class__.__name__)

    @property
    def logger(self) -> Any:
        """Acesso ao logger do serviço."""
        return self._logger

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
