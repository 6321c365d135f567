"""
Modelos de dados de configuração.

Define a estrutura tipada das configurações usando Dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from revcard.config.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    DEFAULTS,
    LEVEL_VALUES,
    VALID_CARD_DESIGNS,
    ErrorCode,
)
from revcard.config.validators import (
    ensure_path_exists,
    validate_choice,
    validate_not_empty,
    validate_optional_positive_int,
    validate_positive_int,
    validate_type,
    validate_url,
)


@dataclass
class LoggerConfig:
    """Configuração para o sistema de logging."""

    nivel_minimo: str = "INFO"
    arquivo_log: Optional[Path] = None
    sobrescrever_arquivo: bool = False
    mostrar_localizacao: bool = False
    usar_cores: bool = True
    formato_json: bool = False
    diretorio_erros: Optional[Path] = None

    def __post_init__(self):
        self.nivel_minimo = self.nivel_minimo.upper()
        validate_choice(self.nivel_minimo, set(LEVEL_VALUES.keys()), "nivel_minimo")

        if self.arquivo_log:
            self.arquivo_log = ensure_path_exists(self.arquivo_log)
        if self.diretorio_erros:
            self.diretorio_erros = ensure_path_exists(self.diretorio_erros)

    def validate(self):
        """Revalida a configuração após mutações."""
        self.__post_init__()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LoggerConfig:
        clean_data = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "usar_cores" in clean_data: validate_type(clean_data["usar_cores"], bool, "logging.usar_cores")
        if "formato_json" in clean_data: validate_type(clean_data["formato_json"], bool, "logging.formato_json")

        # Conversão de paths
        if clean_data.get("arquivo_log"):
            clean_data["arquivo_log"] = Path(clean_data["arquivo_log"])
        if clean_data.get("diretorio_erros"):
            clean_data["diretorio_erros"] = Path(clean_data["diretorio_erros"])

        return cls(**clean_data)


@dataclass
class APIConfig:
    """Configuração de acesso ao backend bancário."""

    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULTS["timeout_api"]
    user_agent: str = DEFAULT_USER_AGENT
    client_version: str = DEFAULTS["client_version"]
    browser_application: str = DEFAULTS["browser_application"]
    # Envia X-Verify-Password em todas as chamadas, como o app original
    verify_password_always: bool = True

    def __post_init__(self):
        validate_url(self.base_url, "api.base_url")
        validate_positive_int(self.timeout, "api.timeout")
        validate_not_empty(self.user_agent, "api.user_agent")
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> APIConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "timeout" in clean: validate_type(clean["timeout"], int, "api.timeout")
        if "verify_password_always" in clean: validate_type(clean["verify_password_always"], bool, "api.verify_password_always")
        if "client_version" in clean: clean["client_version"] = str(clean["client_version"])

        return cls(**clean)


@dataclass
class AuthConfig:
    """Configuração do fluxo de login e do polling de consentimento."""

    poll_interval_ms: int = DEFAULTS["poll_interval_ms"]
    max_poll_attempts: Optional[int] = None
    consent_pending_code: int = int(ErrorCode.USER_HASNT_PROVIDED_CONSENT)

    def __post_init__(self):
        validate_positive_int(self.poll_interval_ms, "auth.poll_interval_ms", min_value=0)
        validate_optional_positive_int(self.max_poll_attempts, "auth.max_poll_attempts")

    @property
    def poll_interval(self) -> float:
        """Intervalo de polling em segundos."""
        return self.poll_interval_ms / 1000.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AuthConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "poll_interval_ms" in clean: validate_type(clean["poll_interval_ms"], int, "auth.poll_interval_ms")
        if "max_poll_attempts" in clean: validate_type(clean["max_poll_attempts"], int, "auth.max_poll_attempts")
        if "consent_pending_code" in clean: validate_type(clean["consent_pending_code"], int, "auth.consent_pending_code")

        return cls(**clean)


@dataclass
class CardsConfig:
    """Política de escolha e emissão de cartões descartáveis."""

    disposable_design: str = DEFAULTS["disposable_design"]
    disposable_label: str = DEFAULTS["disposable_label"]
    reuse_existing_disposable_card: bool = True

    def __post_init__(self):
        validate_choice(self.disposable_design, VALID_CARD_DESIGNS, "cards.disposable_design")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CardsConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "reuse_existing_disposable_card" in clean:
            validate_type(clean["reuse_existing_disposable_card"], bool, "cards.reuse_existing_disposable_card")

        return cls(**clean)


@dataclass
class StorageConfig:
    """Onde a sessão persistida é guardada."""

    session_file: Path = Path(DEFAULTS["session_file"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StorageConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}
        if clean.get("session_file"):
            clean["session_file"] = Path(clean["session_file"]).expanduser()
        return cls(**clean)


@dataclass
class AppConfig:
    """
    Configuração raiz da aplicação.
    Agrega todas as outras configurações.
    """

    debug: bool = False

    api: Optional[APIConfig] = None
    auth: Optional[AuthConfig] = None
    cards: Optional[CardsConfig] = None
    storage: Optional[StorageConfig] = None
    logging: Optional[LoggerConfig] = None

    def __post_init__(self):
        if self.api is None: self.api = APIConfig()
        if self.auth is None: self.auth = AuthConfig()
        if self.cards is None: self.cards = CardsConfig()
        if self.storage is None: self.storage = StorageConfig()
        if self.logging is None: self.logging = LoggerConfig()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        api = APIConfig.from_dict(data.get("api") or {})
        auth = AuthConfig.from_dict(data.get("auth") or {})
        cards = CardsConfig.from_dict(data.get("cards") or {})
        storage = StorageConfig.from_dict(data.get("storage") or {})
        logging = LoggerConfig.from_dict(data.get("logging") or {})

        nested_keys = {"api", "auth", "cards", "storage", "logging"}
        root_args = {k: v for k, v in data.items() if k in cls.__annotations__ and k not in nested_keys}

        if "debug" in root_args: validate_type(root_args["debug"], bool, "debug")

        return cls(
            **root_args,
            api=api,
            auth=auth,
            cards=cards,
            storage=storage,
            logging=logging,
        )
