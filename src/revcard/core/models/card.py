"""
Entidades de Cartão.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CardExpiry:
    """Validade do cartão (ano com quatro dígitos)."""
    month: int
    year: int

    def formatted(self) -> str:
        """Retorna a validade no formato MM/YY."""
        return f"{self.month:02d}/{self.year % 100:02d}"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional[CardExpiry]:
        if not data or data.get("month") is None or data.get("year") is None:
            return None
        return cls(month=int(data["month"]), year=int(data["year"]))


@dataclass
class CardSummary:
    """Item de `GET /cards`."""
    id: str
    virtual: bool = False
    disposable: bool = False
    state: str = ""
    label: Optional[str] = None
    last_four: Optional[str] = None
    brand: Optional[str] = None
    design: Optional[str] = None
    expiry_date: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_disposable_virtual(self) -> bool:
        return self.virtual and self.disposable

    @classmethod
    def _fields_from(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(data.get("id", "")),
            "virtual": bool(data.get("virtual", False)),
            "disposable": bool(data.get("disposable", False)),
            "state": data.get("state") or "",
            "label": data.get("label"),
            "last_four": data.get("lastFour"),
            "brand": data.get("brand"),
            "design": data.get("design"),
            "expiry_date": data.get("expiryDate"),
            "raw": dict(data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CardSummary:
        return cls(**cls._fields_from(data))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw) if self.raw else {
            "id": self.id,
            "virtual": self.virtual,
            "disposable": self.disposable,
            "state": self.state,
        }


@dataclass
class CardDetails(CardSummary):
    """Resposta de detalhe/emissão/exclusão, com `pan` e `cvv` ainda cifrados."""
    pan: Optional[str] = None
    cvv: Optional[str] = None
    expiry: Optional[CardExpiry] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CardDetails:
        return cls(
            **cls._fields_from(data),
            pan=data.get("pan"),
            cvv=data.get("cvv"),
            expiry=CardExpiry.from_dict(data.get("expiry")),
        )


@dataclass(frozen=True)
class CardSecrets:
    """Dados decifrados do cartão. Nunca persistidos."""
    pan: str
    cvv: str
    expiry: Optional[CardExpiry] = None

    def formatted_pan(self) -> str:
        """PAN em grupos de quatro dígitos."""
        return " ".join(self.pan[i:i + 4] for i in range(0, len(self.pan), 4))

    def __repr__(self) -> str:
        return f"CardSecrets(pan='**** {self.pan[-4:]}', cvv='***', expiry={self.expiry!r})"
