"""
Servicio de autenticación
- Registro y verificación de correo
- Login por correo o por usuario
- Emisión y renovación de tokens
- Restablecimiento de contraseña
- Limpieza de cuentas sin verificar
"""

from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import delete, select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logging_config import get_logger
from app.core.security import (
    REFRESH_TOKEN_TYPE,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_one_time_token,
    get_password_hash,
    verify_password,
)
from app.models.user import User, ROLE_ADMIN, ROLE_USER, DEFAULT_PHONE
from app.services import mailer, user_service
from app.services.email_check import is_email_valid

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Credenciales inválidas"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def validate_user(db: AsyncSession, email: str, password: str) -> User:
    """Credenciales por correo; exige correo verificado y cuenta activa"""
    user = await user_service.find_by_email(db, email)
    if not user:
        raise _unauthorized(INVALID_CREDENTIALS)

    if not verify_password(password, user.password):
        raise _unauthorized(INVALID_CREDENTIALS)

    if not user.verified:
        raise _unauthorized("Por favor verifica tu correo electrónico antes de iniciar sesión")

    if not user.is_active:
        raise _unauthorized("La cuenta está desactivada")

    return user


async def validate_user_by_username(db: AsyncSession, username: str, password: str) -> User:
    """Credenciales por nombre de usuario; solo para el rol USER, sin verificación de correo"""
    user = await user_service.find_by_username(db, username)
    if not user:
        raise _unauthorized(INVALID_CREDENTIALS)

    if user.role != ROLE_USER:
        raise _unauthorized("Este método de autenticación es solo para usuarios regulares")

    if not verify_password(password, user.password):
        raise _unauthorized(INVALID_CREDENTIALS)

    if not user.is_active:
        raise _unauthorized("La cuenta está desactivada")

    return user


async def register(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str,
    username: str,
    phone: Optional[str] = None,
    birthdate: Optional[date] = None,
    language: str = "es",
    timezone: str = "UTC",
) -> User:
    """
    Registro público. La cuenta se crea como ADMIN, sin verificar, y recibe
    un token de verificación por correo. Si no se verifica a tiempo, la
    tarea de limpieza la elimina.
    """
    await user_service.ensure_unique(db, email=email, username=username)

    if not await is_email_valid(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El correo electrónico no es válido o el dominio no existe",
        )

    verify_token = generate_one_time_token()
    user = User(
        email=email,
        password=get_password_hash(password),
        name=name,
        username=username,
        phone=phone or DEFAULT_PHONE,
        birthdate=birthdate,
        language=language,
        timezone=timezone,
        verified=False,
        verify_token=verify_token,
        verify_token_expires=datetime.utcnow() + timedelta(hours=settings.VERIFY_TOKEN_EXPIRE_HOURS),
        role=ROLE_ADMIN,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Registro concurrente con el mismo correo o usuario
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="El correo electrónico o nombre de usuario ya está en uso",
        )
    await db.refresh(user)
    logger.info(f"👤 Usuario registrado: {user.id} ({user.email})")

    await mailer.send_verification_email(user.email, verify_token, user.name)
    return user


async def verify_email(db: AsyncSession, token: str) -> User:
    result = await db.execute(
        select(User).where(and_(
            User.verify_token == token,
            User.verify_token_expires > datetime.utcnow(),
        ))
    )
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token inválido o expirado")

    user.verified = True
    user.verify_token = None
    user.verify_token_expires = None
    await db.commit()
    await db.refresh(user)
    logger.info(f"✅ Correo verificado: {user.email}")
    return user


async def request_password_reset(db: AsyncSession, email: str) -> bool:
    """Siempre devuelve True para no revelar qué correos existen"""
    user = await user_service.find_by_email(db, email)
    if not user:
        return True

    token = generate_one_time_token()
    user.password_reset_token = token
    user.password_reset_token_expires = datetime.utcnow() + timedelta(
        minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
    )
    await db.commit()

    await mailer.send_password_reset_email(user.email, token)
    return True


async def reset_password(db: AsyncSession, token: str, new_password: str) -> bool:
    result = await db.execute(
        select(User).where(and_(
            User.password_reset_token == token,
            User.password_reset_token_expires > datetime.utcnow(),
        ))
    )
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token inválido o expirado")

    user.password = get_password_hash(new_password)
    user.password_reset_token = None
    user.password_reset_token_expires = None
    user.password_changed_at = datetime.utcnow()
    await db.commit()
    logger.info(f"🔑 Contraseña restablecida: {user.email}")
    return True


def issue_tokens(user: User) -> dict:
    return {
        "access_token": create_access_token(user.id, user.email, user.role),
        "refresh_token": create_refresh_token(user.id, user.email, user.role),
        "token_type": "bearer",
    }


async def login(db: AsyncSession, user: User, ip_address: Optional[str] = None) -> dict:
    user.last_login_at = datetime.utcnow()
    if ip_address:
        user.last_login_ip = ip_address
    await db.commit()
    await db.refresh(user)

    return {
        **issue_tokens(user),
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "verified": user.verified,
        },
    }


async def refresh_tokens(db: AsyncSession, refresh_token: str) -> dict:
    """Cualquier fallo se reporta igual: 401"""
    invalid = _unauthorized("Token de actualización inválido o expirado")
    try:
        payload = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        user_id = int(payload["sub"])
    except (TokenError, ValueError):
        raise invalid

    user = await user_service.find_by_id(db, user_id)
    if not user or not user.is_active:
        raise invalid

    return issue_tokens(user)


async def purge_unverified_users(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Elimina cuentas cuyo token de verificación venció sin usarse"""
    result = await db.execute(
        delete(User).where(and_(
            User.verified.is_(False),
            User.verify_token_expires.is_not(None),
            User.verify_token_expires <= (now or datetime.utcnow()),
        ))
    )
    await db.commit()
    removed = result.rowcount or 0
    if removed:
        logger.info(f"🗑️ Usuarios sin verificar eliminados: {removed}")
    return removed
