"""
Carregador de configuração (Loader).

Responsável por ler o arquivo de configuração (YAML) e aplicar overrides
via variáveis de ambiente, retornando uma instância válida de AppConfig.
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from revcard.config.models import AppConfig
from revcard.core.exceptions import ConfigurationException


class ConfigLoaderException(ConfigurationException):
    """Erro ao carregar configurações."""
    pass


class ConfigLoader:
    """Carregador de configurações."""

    DEFAULT_FILENAME = "config.yaml"

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> AppConfig:
        """
        Carrega a configuração completa.

        Ordem de precedência:
        1. Defaults do código
        2. Arquivo YAML
        3. Variáveis de Ambiente (REVCARD_*)

        Args:
            path: Caminho opcional para o arquivo config.yaml

        Returns:
            AppConfig: Configuração validada e carregada.

        Raises:
            ConfigLoaderException: Se houver erro de parsing, IO ou validação.
        """
        config_path = Path(path) if path else Path(cls.DEFAULT_FILENAME)

        file_data = cls._read_yaml(config_path)
        merged_data = cls._apply_env_overrides(file_data)

        try:
            return AppConfig.from_dict(merged_data)
        except Exception as e:
            raise ConfigLoaderException(f"Erro ao validar configuração: {e}", cause=e) from e

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """Lê arquivo YAML com segurança."""
        if not path.exists():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoaderException(f"Erro ao ler arquivo {path}: {e}", cause=e) from e

        if not isinstance(data, dict):
            raise ConfigLoaderException(
                f"Arquivo {path} deve conter um mapeamento YAML",
                details={"type": type(data).__name__},
            )
        return data

    @classmethod
    def _overrides(cls) -> Dict[str, Tuple[List[str], Callable[[str], Any]]]:
        """Mapeamento: ENV_VAR -> (caminho no dict, conversor)."""
        return {
            "REVCARD_DEBUG": (["debug"], cls._parse_bool),
            "REVCARD_BASE_URL": (["api", "base_url"], str),
            "REVCARD_TIMEOUT": (["api", "timeout"], int),
            "REVCARD_USER_AGENT": (["api", "user_agent"], str),
            "REVCARD_VERIFY_PASSWORD_ALWAYS": (["api", "verify_password_always"], cls._parse_bool),
            "REVCARD_POLL_INTERVAL_MS": (["auth", "poll_interval_ms"], int),
            "REVCARD_MAX_POLL_ATTEMPTS": (["auth", "max_poll_attempts"], int),
            "REVCARD_REUSE_DISPOSABLE": (["cards", "reuse_existing_disposable_card"], cls._parse_bool),
            "REVCARD_SESSION_FILE": (["storage", "session_file"], str),
            "REVCARD_LOG_LEVEL": (["logging", "nivel_minimo"], str),
            "REVCARD_LOG_FILE": (["logging", "arquivo_log"], str),
        }

    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Aplica overrides via variáveis de ambiente (REVCARD_...)."""
        out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in data.items()}

        for env_var, (keys, type_func) in cls._overrides().items():
            val = os.getenv(env_var)
            if val is None:
                continue
            try:
                cls._set_nested(out, keys, type_func(val))
            except ValueError as e:
                raise ConfigLoaderException(
                    f"Valor inválido em {env_var}: {val!r}",
                    details={"env_var": env_var},
                    cause=e,
                ) from e

        return out

    @staticmethod
    def _set_nested(data: Dict[str, Any], keys: list, value: Any) -> None:
        """Helper para setar valor em dict aninhado."""
        current = data
        for key in keys[:-1]:
            current = current.setdefault(key, {})
        current[keys[-1]] = value

    @staticmethod
    def _parse_bool(val: str) -> bool:
        """Parse seguro de boolean."""
        return val.strip().lower() in ("true", "1", "yes", "on")
