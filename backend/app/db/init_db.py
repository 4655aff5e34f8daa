import asyncio
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.core.logging_config import get_logger
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import SessionLocal, engine as default_engine

# Registrar todas las tablas en Base.metadata
from app.models import User, Client, Product, Order, OrderProduct, Service  # noqa: F401
from app.models.user import ROLE_ADMIN

logger = get_logger(__name__)


async def ensure_tables_exist(engine: Optional[AsyncEngine] = None) -> None:
    """
    Crea las tablas que falten (se llama al arrancar la aplicación)
    """
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_first_admin(
    db: AsyncSession,
    email: str,
    password: str,
    name: str = "Administrador",
    username: str = "admin",
) -> User:
    """Crea el administrador inicial si aún no existe"""
    result = await db.execute(select(User).where(User.email == email))
    admin = result.scalars().first()
    if admin:
        logger.info(f"El administrador {email} ya existe")
        return admin

    admin = User(
        email=email,
        username=username,
        password=get_password_hash(password),
        name=name,
        role=ROLE_ADMIN,
        verified=True,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info(f"Administrador creado: {email}")
    return admin


async def init_db(email: str, password: str) -> None:
    """
    Inicializa la base de datos: tablas + administrador
    """
    await ensure_tables_exist()
    async with SessionLocal() as db:
        await create_first_admin(db, email, password)


if __name__ == "__main__":
    import os

    asyncio.run(init_db(
        os.getenv("FIRST_ADMIN_EMAIL", "admin@tecnicentrojr.com"),
        os.getenv("FIRST_ADMIN_PASSWORD", "Admin123*"),
    ))
