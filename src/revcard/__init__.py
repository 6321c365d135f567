"""
Revcard - cliente da API interna do banco para cartões descartáveis.

Organização:
- core/models: Entidades (sessão, token, cartões)
- core/services: Autenticação, renovação de token, cartões e criptografia
- core/exceptions: Hierarquia de exceções
- adapters/api: Cliente HTTP do backend
- adapters/repositories: Persistência da sessão
- infrastructure: Logging
"""

from revcard.core.exceptions import (
    RevcardBaseException,
    AuthenticationException,
    NeedsReauthenticationError,
    ConsentTimeoutOrRejected,
)
from revcard.core.models import CardSecrets, CardSummary, PersistedSession
from revcard.client import BankClient
from revcard.adapters.repositories import InMemorySessionStore, JsonFileSessionStore

__version__ = "1.0.0"

__all__ = [
    "BankClient",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "CardSecrets",
    "CardSummary",
    "PersistedSession",
    "RevcardBaseException",
    "AuthenticationException",
    "NeedsReauthenticationError",
    "ConsentTimeoutOrRejected",
]
