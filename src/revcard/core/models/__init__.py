"""
Pacote de Modelos (Entidades) do Domínio.

Centraliza todas as estruturas de dados do sistema.
"""

from .session import (
    PersistedSession,
    SessionCredentials,
    SignInTicket,
    TokenState,
    UserRef,
)
from .card import CardDetails, CardExpiry, CardSecrets, CardSummary

__all__ = [
    "PersistedSession",
    "SessionCredentials",
    "SignInTicket",
    "TokenState",
    "UserRef",
    "CardDetails",
    "CardExpiry",
    "CardSecrets",
    "CardSummary",
]
