"""Identidade sintética de dispositivo enviada em `X-Device-Id`."""

from __future__ import annotations

import uuid
from typing import Optional


class DeviceIdentity:
    """
    UUID4 gerado uma vez por instância de cliente.

    Uma sessão retomada traz o próprio identificador, que tem precedência.
    """

    def __init__(self, value: Optional[str] = None):
        self._value = value or str(uuid.uuid4())

    @property
    def value(self) -> str:
        return self._value

    def restore(self, value: str) -> None:
        """Adota o identificador gravado numa sessão retomada."""
        if value:
            self._value = value

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"DeviceIdentity({self._value!r})"
