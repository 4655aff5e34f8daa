"""Dependencias: sesión de base de datos, usuario autenticado y roles"""
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.core.security import ACCESS_TOKEN_TYPE, TokenError, decode_token
from app.db.session import SessionLocal
from app.models.user import User

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Sesión de base de datos por petición
    """
    async with SessionLocal() as session:
        yield session


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Usuario autenticado a partir del bearer token.

    Usage:
        @router.get("/protegido")
        async def protegido(user: User = Depends(get_current_user)):
            ...
    """
    if not credentials:
        raise _unauthorized("No autorizado")

    try:
        payload = decode_token(credentials.credentials, ACCESS_TOKEN_TYPE)
    except TokenError as e:
        raise _unauthorized("Token expirado" if e.expired else "Token inválido")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Token inválido")

    user = await db.get(User, user_id)
    if not user:
        raise _unauthorized("Usuario no encontrado")
    if not user.is_active:
        raise _unauthorized("Cuenta desactivada")
    return user


def require_roles(*roles: str):
    """
    Fábrica de dependencias para control de acceso por rol.

    Usage:
        @router.delete("/{id}")
        async def borrar(user: User = Depends(require_roles(ROLE_ADMIN))):
            ...
    """
    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if not user.role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tienes permisos para realizar esta acción",
            )
        if user.role not in roles:
            logger.debug(f"Usuario {user.id} con rol {user.role} requiere alguno de {roles}: DENEGADO")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Se requiere uno de estos roles: {', '.join(roles)}",
            )
        return user

    return role_checker
