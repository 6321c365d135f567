"""
Funções de validação reutilizáveis.

Este módulo contém funções puras para validar dados de configuração,
garantindo integridade dos dados antes da utilização.
"""

from typing import Any, Iterable, Optional, Set
from pathlib import Path

from revcard.core.exceptions import ConfigurationException


class ValidationException(ConfigurationException):
    """Erro base para falhas de validação."""
    pass


def validate_positive_int(value: int, field_name: str, min_value: int = 1) -> None:
    """
    Valida se um número inteiro é positivo ou maior que um mínimo.

    Args:
        value: O valor a ser validado.
        field_name: Nome do campo para mensagem de erro.
        min_value: Valor mínimo aceitável (default: 1).

    Raises:
        ValidationException: Se o valor for menor que min_value.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationException(
            f"{field_name} deve ser um número inteiro.",
            details={"value": value, "type": type(value).__name__}
        )

    if value < min_value:
        raise ValidationException(
            f"{field_name} deve ser >= {min_value}",
            details={"value": value, "min_value": min_value}
        )


def validate_optional_positive_int(value: Optional[int], field_name: str, min_value: int = 1) -> None:
    """Como ``validate_positive_int``, mas aceita ``None``."""
    if value is not None:
        validate_positive_int(value, field_name, min_value)


def validate_not_empty(value: Iterable[Any], field_name: str) -> None:
    """
    Valida se uma coleção (lista, set, string) não está vazia.

    Args:
        value: A coleção a validar.
        field_name: Nome do campo.
    """
    if not value:
        raise ValidationException(f"{field_name} não pode estar vazio")


def validate_choice(value: str, valid_choices: Set[str], field_name: str) -> None:
    """
    Valida se um valor único está dentro das opções permitidas.

    Args:
        value: Valor a validar.
        valid_choices: Conjunto de escolhas permitidas.
        field_name: Nome do campo.
    """
    if value not in valid_choices:
        raise ValidationException(
            f"{field_name} inválido: {value}. Use um dos: {', '.join(sorted(valid_choices))}",
            details={"value": value, "valid_choices": sorted(valid_choices)}
        )


def validate_url(value: str, field_name: str) -> None:
    """Valida que a URL usa http:// ou https://."""
    if not isinstance(value, str) or not value.startswith(("http://", "https://")):
        raise ValidationException(
            f"{field_name} deve começar com http:// ou https://",
            details={"value": value}
        )


def ensure_path_exists(path: Optional[str | Path]) -> Optional[Path]:
    """
    Garante que o diretório pai de um caminho exista.
    Se o caminho for um diretório, cria ele mesmo.

    Args:
        path: Caminho a verificar.

    Returns:
        Path: Objeto Path resolvido ou None se path for None.
    """
    if path is not None:
        resolved = Path(path).expanduser().resolve()
        # Sem extensão: assume diretório
        if not resolved.suffix:
            resolved.mkdir(parents=True, exist_ok=True)
        else:
            resolved.parent.mkdir(parents=True, exist_ok=True)
        return resolved
    return None


def validate_type(value: Any, expected_type: type, field_name: str) -> None:
    """
    Valida estritamente se o valor corresponde ao tipo esperado.
    Não aceita conversão implícita (ex: "true" para bool).

    Args:
        value: Valor a validar.
        expected_type: Tipo esperado (int, bool, str, float, list, dict).
        field_name: Nome do campo.

    Raises:
        ValidationException: Se o tipo estiver incorreto.
    """
    if value is None:
        return

    if expected_type is int and isinstance(value, bool):
        raise ValidationException(
            f"{field_name} deve ser um inteiro, não booleano.",
            details={"value": value, "expected": "int", "got": "bool"}
        )

    if not isinstance(value, expected_type):
        raise ValidationException(
            f"{field_name} deve ser do tipo {expected_type.__name__}.",
            details={
                "value": value,
                "expected": expected_type.__name__,
                "got": type(value).__name__
            }
        )
