"""
Módulo de Configuração do Revcard.

Este pacote centraliza toda a lógica de configuração do sistema.
Use `get_config()` para obter a instância global da configuração.
"""

from typing import Optional

from revcard.config.models import (
    AppConfig,
    APIConfig,
    AuthConfig,
    CardsConfig,
    StorageConfig,
    LoggerConfig,
)
from revcard.config.loader import ConfigLoader, ConfigLoaderException
from revcard.config.constants import ErrorCode, ENDPOINTS

# Singleton global
_CONFIG_INSTANCE: Optional[AppConfig] = None


def get_config(reload: bool = False, config_path: str = None) -> AppConfig:
    """
    Obtém a instância global de configuração via Singleton.

    Args:
        reload: Se True, recarrega do disco.
        config_path: Caminho opcional para arquivo de config.

    Returns:
        AppConfig: Instância da configuração atual.
    """
    global _CONFIG_INSTANCE

    if _CONFIG_INSTANCE is None or reload:
        _CONFIG_INSTANCE = ConfigLoader.load(config_path)

    return _CONFIG_INSTANCE


def set_config(config: Optional[AppConfig]) -> None:
    """Substitui a configuração global (usado pela CLI e pelos testes)."""
    global _CONFIG_INSTANCE
    _CONFIG_INSTANCE = config


__all__ = [
    "get_config",
    "set_config",
    "AppConfig",
    "APIConfig",
    "AuthConfig",
    "CardsConfig",
    "StorageConfig",
    "LoggerConfig",
    "ConfigLoader",
    "ConfigLoaderException",
    "ErrorCode",
    "ENDPOINTS",
]
