"""Serviços do núcleo."""

from .base_service import BaseService
from .device import DeviceIdentity
from .crypto import decrypt_field, derive_key, encrypt_field
from .token_service import TokenRefreshManager
from .auth_service import AuthService, AuthState
from .card_service import CardService

__all__ = [
    "BaseService",
    "DeviceIdentity",
    "decrypt_field",
    "derive_key",
    "encrypt_field",
    "TokenRefreshManager",
    "AuthService",
    "AuthState",
    "CardService",
]
