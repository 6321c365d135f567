"""
Classe base para clientes de API.
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Dict, List, Optional

import requests

from revcard.core.exceptions import (
    BackendErrorException,
    InvalidAPIResponseException,
    RequestException,
    RequestTimeoutException,
    wrap_exception,
)


class BaseAPIClient(ABC):
    """
    Classe base para clientes HTTP.

    Fornece funcionalidades comuns:
    - Sessão `requests` reutilizável (injetável nos testes)
    - Logger
    - Tradução de erros do `requests` para exceções do Revcard
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        logger: Optional[Any] = None,
        timeout: int = 30,
    ):
        """
        Inicializa o cliente de API.

        Args:
            base_url: URL base sem barra final
            session: Sessão HTTP (padrão: requests.Session())
            logger: Logger (opcional)
            timeout: Timeout em segundos
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self._logger = logger or self._get_logger()
        self.timeout = timeout

    def _get_logger(self) -> Any:
        """Obtém logger padrão."""
        from revcard.infrastructure.logging import get_logger
        return get_logger().com_contexto(cliente=self.__class__.__name__)

    @property
    def logger(self) -> Any:
        return self._logger

    def _request(
        self,
        method: str,
        endpoint: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """
        Método central para realizar requisições HTTP.

        Returns:
            requests.Response: Resposta com status < 400

        Raises:
            BackendErrorException: Status HTTP >= 400 (payload preservado)
            RequestTimeoutException: Timeout
            RequestException: Falha de conexão ou outro erro do requests
        """
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault("timeout", self.timeout)

        self.logger.debug(f"{method} {endpoint}")

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.exceptions.Timeout as e:
            error_msg = f"Timeout ao acessar {url}"
            self.logger.erro(error_msg)
            raise RequestTimeoutException(
                error_msg,
                details={"url": url, "method": method, "endpoint": endpoint},
                cause=e,
            ) from e
        except requests.exceptions.ConnectionError as e:
            error_msg = f"Erro de conexão ao acessar {url}"
            self.logger.erro(error_msg)
            raise RequestException(
                error_msg,
                details={"url": url, "method": method},
                cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            self.logger.erro(f"Erro ao acessar {url}: {e}")
            raise wrap_exception(
                e, RequestException,
                f"Erro de requisição: {e}",
                url=url, method=method
            ) from e

        if response.status_code >= 400:
            payload = self._safe_json(response)
            self.logger.debug(
                f"Backend respondeu {response.status_code} em {endpoint}",
                status_code=response.status_code,
            )
            raise BackendErrorException(response.status_code, payload=payload, url=url)

        return response

    @staticmethod
    def _safe_json(response: requests.Response) -> Any:
        """Corpo JSON se houver, senão o texto cru (ou None)."""
        try:
            return response.json()
        except ValueError:
            return response.text or None

    def _parse_json(self, response: requests.Response, context: Optional[Dict[str, Any]] = None) -> Any:
        """
        Faz parse do corpo JSON.

        Raises:
            InvalidAPIResponseException: Se o corpo não for JSON
        """
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise InvalidAPIResponseException(
                "Resposta não é JSON válido",
                details={"status_code": response.status_code, **(context or {})},
                cause=e,
            ) from e

    @staticmethod
    def _set_cookie_headers(response: requests.Response) -> List[str]:
        """
        Cabeçalhos `Set-Cookie` crus, na ordem recebida.

        O `requests` junta cabeçalhos repetidos com vírgula em `headers`, por
        isso a lista é lida do urllib3 quando disponível.
        """
        raw = getattr(response, "raw", None)
        raw_headers = getattr(raw, "headers", None)
        if raw_headers is not None and hasattr(raw_headers, "getlist"):
            values = raw_headers.getlist("Set-Cookie")
            if values:
                return list(values)

        joined = response.headers.get("Set-Cookie")
        return [joined] if joined else []
