# backend/multistore/core/security.py
"""
Utilidades de seguridad: hashing de contraseñas y validación de API key.
"""

import secrets
from typing import Optional

from passlib.context import CryptContext

from multistore.core.constants import AppConstants

# pbkdf2_sha256 es puro Python en passlib y no depende del backend bcrypt
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def extract_api_key(
    api_key_header: Optional[str],
    authorization_header: Optional[str],
    constants: AppConstants,
) -> Optional[str]:
    """Obtiene la clave de X-API-Key o, en su defecto, de 'Authorization: Bearer <clave>'."""
    if api_key_header:
        return api_key_header
    if authorization_header and authorization_header.startswith(constants.BEARER_PREFIX):
        return authorization_header[len(constants.BEARER_PREFIX):].strip()
    return None


def is_valid_api_key(provided: Optional[str], expected: str) -> bool:
    if not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
