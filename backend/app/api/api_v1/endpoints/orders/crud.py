"""
Operaciones CRUD de ventas
- Listado
- Alta
- Actualización
- Borrado
"""

from typing import Any, Optional
from datetime import datetime, timedelta
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db, require_roles
from app.core.logging_config import get_logger
from app.models.order import Order, OrderProduct, ORDER_COMPLETED, ORDER_CANCELLED, ORDER_PENDING
from app.models.service import Service, SERVICE_PENDING
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.auth import MessageResponse
from app.schemas.order import OrderCreate, OrderUpdate, OrderResponse, OrderListResponse

from .core import (
    generate_order_no, build_order_response, base_order_query, load_order,
    get_order_or_404, ensure_can_view, resolve_client
)
from .stock_ops import take_stock, restore_stock

logger = get_logger(__name__)

router = APIRouter()

staff = require_roles(ROLE_ADMIN, ROLE_USER)


def _parse_date(value: str, field: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Fecha inválida en {field}, formato esperado AAAA-MM-DD")


async def _list_orders(db: AsyncSession, conditions: list, page: int, limit: int) -> OrderListResponse:
    query = base_order_query()
    if conditions:
        query = query.where(and_(*conditions))

    count_query = select(func.count()).select_from(
        select(Order.id).where(and_(*conditions)).subquery() if conditions else Order
    )
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)
    orders = (await db.execute(query)).scalars().unique().all()

    return OrderListResponse(
        data=[build_order_response(o) for o in orders],
        total=total,
        page=page,
        limit=limit
    )


@router.get("", response_model=OrderListResponse)
async def list_orders(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None),
    client_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Número de venta"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None)) -> Any:
    """Listado de ventas; un USER solo ve las suyas"""
    conditions = []

    if not current_user.is_admin:
        conditions.append(Order.user_id == current_user.id)
    if status:
        conditions.append(Order.status == status)
    if client_id:
        conditions.append(Order.client_id == client_id)
    if search:
        conditions.append(Order.order_no.contains(search))
    if start_date:
        conditions.append(Order.created_at >= _parse_date(start_date, "start_date"))
    if end_date:
        # Fecha final inclusiva
        conditions.append(Order.created_at < _parse_date(end_date, "end_date") + timedelta(days=1))

    return await _list_orders(db, conditions, page, limit)


@router.get("/user/{user_id}", response_model=OrderListResponse)
async def list_user_orders(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100)) -> Any:
    if not await db.get(User, user_id):
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return await _list_orders(db, [Order.user_id == user_id], page, limit)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    order_in: OrderCreate) -> Any:
    """
    Registrar una venta.

    - Descuenta el stock de los productos
    - Crea los servicios en estado PENDING
    - El total se calcula en el servidor
    """
    if not order_in.products and not order_in.services:
        raise HTTPException(status_code=400, detail="La venta debe incluir al menos un producto o servicio")

    lines = await take_stock(db, order_in.products)
    client = await resolve_client(db, order_in.client_id, order_in.client_info, current_user.id)

    order = Order(
        order_no=await generate_order_no(db),
        status=order_in.status,
        payment_method=order_in.payment_method,
        client_id=client.id if client else None,
        user_id=current_user.id,
        notes=order_in.notes,
        completed_at=datetime.utcnow() if order_in.status == ORDER_COMPLETED else None)

    for product, item_in in lines:
        unit_price = item_in.unit_price if item_in.unit_price is not None else product.price
        item = OrderProduct(
            product_id=product.id,
            name=product.name,
            quantity=item_in.quantity,
            price=Decimal(str(unit_price)))
        item.calculate()
        order.products.append(item)

    for service_in in order_in.services:
        order.services.append(Service(
            name=service_in.name,
            description=service_in.description,
            price=Decimal(str(service_in.price)),
            type=service_in.type,
            photo_urls=service_in.photo_urls,
            status=SERVICE_PENDING,
            client_id=client.id if client else None,
            user_id=current_user.id))

    order.recalculate_total()
    db.add(order)
    try:
        await db.commit()
    except IntegrityError:
        # Número de venta o DNI tomados por otra venta en paralelo
        await db.rollback()
        raise HTTPException(status_code=409, detail="Conflicto al registrar la venta, inténtalo de nuevo")

    order = await load_order(db, order.id)
    logger.info(f"🧾 Venta registrada: {order.order_no} total {order.total_amount} por usuario {current_user.id}")
    return build_order_response(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    order_id: int) -> Any:
    order = await get_order_or_404(db, order_id)
    ensure_can_view(order, current_user)
    return build_order_response(order)


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    order_id: int,
    order_in: OrderUpdate) -> Any:
    """Cambiar estado (PENDING/COMPLETED), medio de pago o notas"""
    order = await get_order_or_404(db, order_id)
    ensure_can_view(order, current_user)

    if order.is_cancelled:
        raise HTTPException(status_code=400, detail="No se puede modificar una venta anulada")

    update_data = order_in.model_dump(exclude_unset=True)

    new_status = update_data.get("status")
    if new_status == ORDER_CANCELLED:
        raise HTTPException(status_code=400, detail="Para anular una venta use la opción de cancelación")
    if new_status is not None and new_status not in (ORDER_PENDING, ORDER_COMPLETED):
        raise HTTPException(status_code=400, detail=f"Estado inválido: {new_status}")

    if new_status == ORDER_COMPLETED and order.status != ORDER_COMPLETED:
        order.completed_at = datetime.utcnow()
    elif new_status == ORDER_PENDING:
        order.completed_at = None

    for field, value in update_data.items():
        if value is not None:
            setattr(order, field, value)

    await db.commit()

    order = await load_order(db, order_id)
    return build_order_response(order)


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    order_id: int) -> Any:
    """Borrar una venta; si no estaba anulada el stock se devuelve"""
    order = await get_order_or_404(db, order_id)

    if not order.is_cancelled:
        await restore_stock(db, order)

    for service in order.services:
        await db.delete(service)

    order_no = order.order_no
    await db.delete(order)
    await db.commit()

    logger.info(f"🗑️ Venta eliminada: {order_no}")
    return {"message": "Venta eliminada correctamente"}
