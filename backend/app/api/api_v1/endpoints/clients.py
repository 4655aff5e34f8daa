"""Gestión de clientes"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db, require_roles
from app.models.client import Client
from app.models.order import Order
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.auth import MessageResponse
from app.schemas.client import ClientCreate, ClientUpdate, ClientResponse, ClientListResponse

router = APIRouter()

staff = require_roles(ROLE_ADMIN, ROLE_USER)


def _search_condition(text: str):
    return or_(
        Client.name.contains(text),
        Client.dni.contains(text),
        Client.ruc.contains(text),
        Client.email.contains(text),
        Client.phone.contains(text),
    )


async def _ensure_unique_dni(db: AsyncSession, dni: Optional[str], exclude_id: Optional[int] = None):
    if not dni:
        return
    result = await db.execute(select(Client).where(Client.dni == dni))
    existing = result.scalar_one_or_none()
    if existing and existing.id != exclude_id:
        raise HTTPException(status_code=409, detail=f"Ya existe un cliente con DNI {dni}")


# Columnas NOT NULL que un PATCH no puede vaciar
REQUIRED_FIELDS = ("name", "is_active")


async def _commit_client(db: AsyncSession, client: Client):
    dni = client.dni
    try:
        await db.commit()
    except IntegrityError:
        # DNI registrado en paralelo
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"Ya existe un cliente con DNI {dni}")
    await db.refresh(client)


@router.get("", response_model=ClientListResponse)
async def list_clients(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(staff),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None)) -> Any:
    query = select(Client)
    if search:
        query = query.where(_search_condition(search))
    if is_active is not None:
        query = query.where(Client.is_active == is_active)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    query = query.order_by(Client.name).offset((page - 1) * limit).limit(limit)
    clients = (await db.execute(query)).scalars().all()

    return ClientListResponse(
        data=[ClientResponse.model_validate(c) for c in clients],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/search", response_model=List[ClientResponse])
async def search_clients(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(staff),
    query: str = Query(..., min_length=1)) -> Any:
    """Búsqueda rápida para el formulario de venta"""
    result = await db.execute(
        select(Client)
        .where(_search_condition(query))
        .order_by(Client.name)
        .limit(20)
    )
    return result.scalars().all()


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(staff),
    client_id: int) -> Any:
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return client


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    client_in: ClientCreate) -> Any:
    await _ensure_unique_dni(db, client_in.dni)

    client = Client(**client_in.model_dump(), created_by=current_user.id)
    db.add(client)
    await _commit_client(db, client)
    return client


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(staff),
    client_id: int,
    client_in: ClientUpdate) -> Any:
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")

    update_data = client_in.model_dump(exclude_unset=True)
    await _ensure_unique_dni(db, update_data.get("dni"), exclude_id=client_id)

    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(client, field, value)

    await _commit_client(db, client)
    return client


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    client_id: int) -> Any:
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")

    # Clientes con ventas no se pueden eliminar
    orders_count = (await db.execute(
        select(func.count(Order.id)).where(Order.client_id == client_id)
    )).scalar() or 0
    if orders_count > 0:
        raise HTTPException(status_code=400, detail=f"El cliente tiene {orders_count} ventas registradas, no se puede eliminar")

    await db.delete(client)
    await db.commit()
    return {"message": "Cliente eliminado correctamente"}
