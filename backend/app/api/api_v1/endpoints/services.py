"""
Servicios técnicos
- Alta directa o desde una venta
- Seguimiento de estado y cobro
"""

import math
from typing import Any, Optional
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.deps import get_db, require_roles
from app.core.logging_config import get_logger
from app.models.client import Client
from app.models.service import Service, SERVICE_STATUSES, SERVICE_PAID
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.service import (
    ServiceCreate, ServiceUpdate, ServiceResponse, ServiceEnvelope, ServiceListResponse
)

logger = get_logger(__name__)

router = APIRouter()


def build_service_response(service: Service) -> ServiceResponse:
    """El cliente debe venir cargado"""
    return ServiceResponse(
        id=service.id,
        name=service.name,
        description=service.description,
        price=float(service.price or 0),
        type=service.type,
        type_display=service.type_display,
        status=service.status,
        status_display=service.status_display,
        paid=service.paid,
        photo_urls=service.photo_urls or [],
        order_id=service.order_id,
        client_id=service.client_id,
        client_name=service.client.name if service.client else None,
        user_id=service.user_id,
        created_at=service.created_at,
        updated_at=service.updated_at)


async def load_service(db: AsyncSession, service_id: int) -> Optional[Service]:
    result = await db.execute(
        select(Service)
        .options(selectinload(Service.client))
        .where(Service.id == service_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _paginate(db: AsyncSession, query, page: int, limit: int) -> ServiceListResponse:
    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    query = (
        query.options(selectinload(Service.client))
        .order_by(Service.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    services = (await db.execute(query)).scalars().all()

    return ServiceListResponse(
        data=[build_service_response(s) for s in services],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0
    )


@router.post("", response_model=ServiceEnvelope, status_code=status.HTTP_201_CREATED)
async def create_service(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_USER)),
    service_in: ServiceCreate) -> Any:
    if service_in.client_id and not await db.get(Client, service_in.client_id):
        raise HTTPException(status_code=404, detail="Cliente no encontrado")

    service = Service(
        name=service_in.name,
        description=service_in.description,
        price=Decimal(str(service_in.price)),
        type=service_in.type,
        photo_urls=service_in.photo_urls,
        client_id=service_in.client_id,
        user_id=current_user.id)
    db.add(service)
    await db.commit()

    service = await load_service(db, service.id)
    logger.info(f"🔧 Servicio creado: {service.id} por usuario {current_user.id}")
    return {"data": build_service_response(service)}


@router.get("", response_model=ServiceListResponse)
async def list_services(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None)) -> Any:
    query = select(Service)
    if status:
        query = query.where(Service.status == status)
    if search:
        query = query.where(or_(
            Service.name.contains(search),
            Service.description.contains(search),
        ))
    return await _paginate(db, query, page, limit)


@router.get("/user/{user_id}", response_model=ServiceListResponse)
async def list_user_services(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100)) -> Any:
    if not await db.get(User, user_id):
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return await _paginate(db, select(Service).where(Service.user_id == user_id), page, limit)


@router.get("/{service_id}", response_model=ServiceEnvelope)
async def get_service(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN, ROLE_USER)),
    service_id: int) -> Any:
    service = await load_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Servicio no encontrado")
    return {"data": build_service_response(service)}


@router.patch("/{service_id}", response_model=ServiceEnvelope)
async def update_service(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_USER)),
    service_id: int,
    service_in: ServiceUpdate) -> Any:
    """
    Actualizar un servicio.

    - Solo el creador o un administrador pueden modificarlo
    - Solo un administrador puede marcarlo como pagado
    - El estado PAID marca el servicio como pagado
    """
    service = await load_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Servicio no encontrado")

    update_data = service_in.model_dump(exclude_unset=True)

    new_status = update_data.get("status")
    if new_status is not None and new_status not in SERVICE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Estado inválido: {new_status}. Valores permitidos: {', '.join(SERVICE_STATUSES)}"
        )

    if not current_user.is_admin and service.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="No tienes permiso para modificar este servicio")

    marks_paid = update_data.get("paid") or new_status == SERVICE_PAID
    if marks_paid and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Solo un administrador puede marcar un servicio como pagado")

    if update_data.get("price") is not None:
        update_data["price"] = Decimal(str(update_data["price"]))

    for field, value in update_data.items():
        if value is not None:
            setattr(service, field, value)

    if service.status == SERVICE_PAID:
        service.paid = True

    await db.commit()

    service = await load_service(db, service_id)
    return {"data": build_service_response(service)}
