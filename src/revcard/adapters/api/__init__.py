"""Clientes HTTP do backend."""

from .base_api import BaseAPIClient
from .bank_api import BankAPI, cookie_value

__all__ = ["BaseAPIClient", "BankAPI", "cookie_value"]
