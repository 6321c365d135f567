"""
Constantes globais do Revcard.

Centraliza os valores fixos do protocolo do backend (endpoints, headers,
códigos de erro) e os padrões de execução.
"""

from enum import IntEnum
from typing import Dict, Set

# ============================================================================
# Protocolo do Backend
# ============================================================================

DEFAULT_BASE_URL = "https://app.revolut.com/api/retail"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/113.0.0.0 Safari/537.36"
)

ENDPOINTS: Dict[str, str] = {
    "signin": "/signin",
    "token": "/token",
    "cards": "/cards",
    "card": "/card/{card_id}",
    "issue": "/card/issue",
}

# Canal enviado no pedido de login
SIGNIN_CHANNEL = "APP"

# Designs aceitos pelo endpoint de emissão de cartões virtuais
VALID_CARD_DESIGNS: Set[str] = {"LIGHT_GREEN_VIRTUAL", "LIGHT_BLUE_VIRTUAL"}


class ErrorCode(IntEnum):
    """Códigos de erro conhecidos devolvidos pelo backend."""

    USER_HASNT_PROVIDED_CONSENT = 9035
    PHONE_OR_AND_PASSCODE_INVALID = 9001
    ACCESS_CODE_EXPIRED = 9039
    UNSUPPORTED_DEVICE = 2007


# ============================================================================
# Logging
# ============================================================================

LEVEL_VALUES: Dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,  # Nível customizado
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

LEVEL_NAMES: Dict[int, str] = {v: k for k, v in LEVEL_VALUES.items()}

# Chaves cujo valor nunca vai para o log em claro
SENSITIVE_KEYS: Set[str] = {"pin", "password", "credentials", "token", "refresh", "cvv", "pan"}

# ============================================================================
# Padrões e Timeouts
# ============================================================================

DEFAULTS = {
    "session_file": "revolut.json",
    "poll_interval_ms": 1000,
    "timeout_api": 30,
    "client_version": "100.0",
    "browser_application": "BROWSER_EXTENSION",
    "disposable_design": "LIGHT_GREEN_VIRTUAL",
    "disposable_label": "Disposable",
}
