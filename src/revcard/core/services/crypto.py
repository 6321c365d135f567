"""
Cifra simétrica dos campos sensíveis de cartão.

O backend cifra `pan` e `cvv` com AES-256 em modo ECB, sem IV e com padding
PKCS#7. A chave são os primeiros 32 bytes do access token, recuperado da
credencial derivada `base64(userId:accessToken)`.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from revcard.core.exceptions import DecryptionError, MalformedCredentialsError

KEY_SIZE = 32
BLOCK_SIZE_BITS = algorithms.AES.block_size


def encode_credentials(user_id: str, access_token: str) -> str:
    """Credencial derivada enviada em `X-Api-Authorization` e no cookie."""
    return base64.b64encode(f"{user_id}:{access_token}".encode("utf-8")).decode("ascii")


def encode_refresh(refresh_code: str) -> str:
    """Refresh derivado enviado no cookie `refresh-token`."""
    return base64.b64encode(refresh_code.encode("utf-8")).decode("ascii")


def derive_key(credentials: str) -> bytes:
    """
    Extrai a chave AES-256 da credencial derivada.

    Args:
        credentials: `base64(userId:accessToken)`

    Returns:
        bytes: Os primeiros 32 bytes do segundo segmento

    Raises:
        MalformedCredentialsError: Se não for base64, faltar o separador
            ou o segmento tiver menos de 32 bytes
    """
    try:
        decoded = base64.b64decode(credentials, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise MalformedCredentialsError("Credencial não é base64 válido", cause=e) from e

    parts = decoded.split(":")
    if len(parts) < 2:
        raise MalformedCredentialsError("Credencial sem separador ':'")

    key = parts[1].encode("utf-8")[:KEY_SIZE]
    if len(key) < KEY_SIZE:
        raise MalformedCredentialsError(
            "Segmento da credencial curto demais para AES-256",
            details={"length": len(key)},
        )
    return key


def _cipher(key: bytes) -> Cipher:
    # ECB faz parte do protocolo do backend
    return Cipher(algorithms.AES(key), modes.ECB())


def decrypt_field(ciphertext_b64: str, key: bytes) -> str:
    """
    Decifra um campo do backend.

    Raises:
        DecryptionError: Base64 inválido, tamanho fora do bloco, padding
            inválido ou texto que não é UTF-8
    """
    try:
        raw = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError("Campo cifrado não é base64 válido", cause=e) from e

    if not raw or len(raw) % (BLOCK_SIZE_BITS // 8):
        raise DecryptionError("Tamanho do campo cifrado não é múltiplo do bloco",
                              details={"length": len(raw)})

    decryptor = _cipher(key).decryptor()
    padded = decryptor.update(raw) + decryptor.finalize()

    unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
    try:
        plain = unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError("Padding PKCS#7 inválido", cause=e) from e

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Texto decifrado não é UTF-8", cause=e) from e


def encrypt_field(plaintext: str, key: bytes) -> str:
    """Inverso de `decrypt_field`: gera um campo compatível com o backend."""
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = _cipher(key).encryptor()
    return base64.b64encode(encryptor.update(padded) + encryptor.finalize()).decode("ascii")
