"""
Utilidades de seguridad
- Hash de contraseñas (bcrypt)
- Emisión y validación de JWT (access / refresh)
- Tokens de un solo uso para verificación y restablecimiento
"""

import re
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Al menos una mayúscula, un número y un carácter especial; mínimo 6 caracteres
PASSWORD_REGEX = re.compile(r"^(?=.*[A-Z])(?=.*\d)(?=.*[*@!#%&?])[A-Za-z\d*@!#%&?]{6,}$")
PASSWORD_POLICY_MESSAGE = (
    "La contraseña debe tener al menos una mayúscula, un número "
    "y un caracter especial (*,@,!,#,%,&,?)"
)


class TokenError(Exception):
    """Token inválido, expirado o de tipo incorrecto"""

    def __init__(self, message: str, expired: bool = False):
        super().__init__(message)
        self.expired = expired


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Hash corrupto o con formato desconocido
        return False


def is_strong_password(password: str) -> bool:
    return bool(PASSWORD_REGEX.match(password or ""))


def generate_one_time_token() -> str:
    """Token aleatorio de 64 caracteres hex (verificación / reseteo)"""
    return secrets.token_hex(32)


def _create_token(subject: Any, email: str, role: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    payload = {
        "sub": str(subject),
        "email": email,
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Dos tokens emitidos en el mismo segundo no deben ser idénticos
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(subject: Any, email: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject, email, role, ACCESS_TOKEN_TYPE,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(subject: Any, email: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject, email, role, REFRESH_TOKEN_TYPE,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, expected_type: str) -> Dict[str, Any]:
    """
    Decodifica y valida un JWT propio.

    Raises:
        TokenError: firma inválida, expirado, sin `sub` o de otro tipo
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenError("Token expirado", expired=True) from e
    except JWTError as e:
        raise TokenError(f"Token inválido: {e}") from e

    if payload.get("type") != expected_type:
        raise TokenError("Tipo de token incorrecto")
    if not payload.get("sub"):
        raise TokenError("Token sin usuario")
    return payload
