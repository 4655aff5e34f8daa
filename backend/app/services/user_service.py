"""
Servicio de usuarios
Consultas, alta de personal, cambios de contraseña
"""

from datetime import datetime
from typing import Optional, Tuple, List

from fastapi import HTTPException, status
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.core.security import (
    PASSWORD_POLICY_MESSAGE,
    get_password_hash,
    is_strong_password,
)
from app.models.order import Order
from app.models.service import Service
from app.models.user import User, ROLE_USER, DEFAULT_PHONE, STATUS_INACTIVE
from app.schemas.user import UserCreate, UserUpdate

logger = get_logger(__name__)


async def find_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def find_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalars().first()


async def find_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def generate_username(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """Nombre de usuario automático: user{AAAAMMDDhhmmss}, con sufijo si ya existe"""
    base = f"user{(now or datetime.now()).strftime('%Y%m%d%H%M%S')}"
    candidate = base
    suffix = 1
    while await find_by_username(db, candidate):
        suffix += 1
        candidate = f"{base}{suffix}"
    return candidate


async def ensure_unique(
    db: AsyncSession,
    email: Optional[str] = None,
    username: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> None:
    """409 si el correo o el usuario ya están en uso"""
    if email:
        existing = await find_by_email(db, email)
        if existing and existing.id != exclude_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El correo electrónico ya está en uso")
    if username:
        existing = await find_by_username(db, username)
        if existing and existing.id != exclude_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El nombre de usuario ya está en uso")


async def create_staff_user(db: AsyncSession, user_in: UserCreate) -> User:
    """
    Alta de un usuario del personal hecha por un administrador.

    El rol siempre es USER y la cuenta queda verificada.
    """
    if not is_strong_password(user_in.password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PASSWORD_POLICY_MESSAGE)

    username = user_in.username or await generate_username(db)
    await ensure_unique(db, email=user_in.email, username=username)

    user = User(
        email=user_in.email,
        username=username,
        password=get_password_hash(user_in.password),
        name=user_in.name,
        phone=user_in.phone or DEFAULT_PHONE,
        language="es",
        timezone="UTC",
        role=ROLE_USER,
        verified=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Usuario creado: {user.id} ({user.username})")
    return user


async def list_users(
    db: AsyncSession,
    page: int,
    limit: int,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[User], int]:
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if search:
        query = query.where(or_(
            User.name.contains(search),
            User.email.contains(search),
            User.username.contains(search),
        ))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    query = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit)
    users = (await db.execute(query)).scalars().all()
    return list(users), total


async def update_user(db: AsyncSession, user: User, user_in: UserUpdate) -> User:
    update_data = user_in.model_dump(exclude_unset=True)
    await ensure_unique(
        db,
        email=update_data.get("email"),
        username=update_data.get("username"),
        exclude_id=user.id,
    )

    password = update_data.pop("password", None)
    if password:
        user.password = get_password_hash(password)
        user.password_changed_at = datetime.utcnow()

    for field, value in update_data.items():
        if value is not None:
            setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


async def update_password(db: AsyncSession, user: User, hashed_password: str) -> User:
    user.password = hashed_password
    user.password_changed_at = datetime.utcnow()
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user: User) -> bool:
    """
    Elimina un usuario. Si tiene ventas o servicios registrados solo se desactiva.

    Returns:
        True si se eliminó, False si se desactivó
    """
    orders_count = (await db.execute(
        select(func.count(Order.id)).where(Order.user_id == user.id)
    )).scalar() or 0
    services_count = (await db.execute(
        select(func.count(Service.id)).where(Service.user_id == user.id)
    )).scalar() or 0

    if orders_count or services_count:
        user.status = STATUS_INACTIVE
        await db.commit()
        logger.info(f"Usuario {user.id} desactivado ({orders_count} ventas, {services_count} servicios)")
        return False

    await db.delete(user)
    await db.commit()
    logger.info(f"Usuario {user.id} eliminado")
    return True
