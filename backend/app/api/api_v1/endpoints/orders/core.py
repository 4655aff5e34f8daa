"""
Funciones comunes de ventas
- Número de venta
- Respuestas
- Consultas y permisos de lectura
- Cliente de la venta
"""

from typing import Optional
from datetime import datetime
from fastapi import HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.client import Client
from app.models.order import Order
from app.models.service import Service
from app.models.user import User
from app.schemas.order import OrderResponse, OrderProductResponse, ClientInfo
from app.api.api_v1.endpoints.services import build_service_response

ORDER_PREFIX = "OV"


async def generate_order_no(db: AsyncSession) -> str:
    """Número de venta: OV{AAAAMMDD}{secuencia de al menos 3 dígitos}"""
    date_str = datetime.now().strftime("%Y%m%d")

    prefix = f"{ORDER_PREFIX}{date_str}"
    # Más largo primero: "...1000" va después de "...999"
    result = await db.execute(
        select(Order.order_no)
        .where(Order.order_no.like(f"{prefix}%"))
        .order_by(func.length(Order.order_no).desc(), Order.order_no.desc())
        .limit(1)
    )
    max_no = result.scalar()

    if max_no:
        try:
            seq = int(max_no[len(prefix):]) + 1
        except ValueError:
            seq = 1
    else:
        seq = 1

    return f"{ORDER_PREFIX}{date_str}{seq:03d}"


def base_order_query():
    """Consulta con productos, servicios, cliente y vendedor cargados"""
    return select(Order).options(
        selectinload(Order.products),
        selectinload(Order.services).selectinload(Service.client),
        selectinload(Order.client),
        selectinload(Order.user),
    )


async def load_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    result = await db.execute(
        base_order_query()
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_order_or_404(db: AsyncSession, order_id: int) -> Order:
    order = await load_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Venta no encontrada")
    return order


def ensure_can_view(order: Order, user: User):
    """Un USER solo accede a sus propias ventas"""
    if not user.is_admin and order.user_id != user.id:
        raise HTTPException(status_code=403, detail="No tienes permiso para acceder a esta venta")


def build_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_no=order.order_no,
        status=order.status,
        status_display=order.status_display,
        payment_method=order.payment_method,
        payment_method_display=order.payment_method_display,
        total_amount=float(order.total_amount or 0),
        client_id=order.client_id,
        client_name=order.client.name if order.client else None,
        user_id=order.user_id,
        user_name=order.user.name if order.user else "",
        notes=order.notes,
        products=[
            OrderProductResponse(
                id=item.id,
                product_id=item.product_id,
                name=item.name,
                quantity=item.quantity,
                price=float(item.price or 0),
                subtotal=float(item.subtotal or 0))
            for item in order.products
        ],
        services=[build_service_response(s) for s in order.services],
        completed_at=order.completed_at,
        cancelled_at=order.cancelled_at,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
        updated_at=order.updated_at)


async def resolve_client(
    db: AsyncSession,
    client_id: Optional[int],
    client_info: Optional[ClientInfo],
    user_id: int) -> Optional[Client]:
    """
    Cliente de la venta.

    Con client_id se usa ese cliente (404 si no existe). Con client_info se
    busca por DNI, luego por correo, y si no aparece se crea uno nuevo.
    """
    if client_id:
        client = await db.get(Client, client_id)
        if not client:
            raise HTTPException(status_code=404, detail="Cliente no encontrado")
        return client

    if not client_info:
        return None

    if client_info.dni:
        result = await db.execute(select(Client).where(Client.dni == client_info.dni))
        client = result.scalar_one_or_none()
        if client:
            return client

    if client_info.email:
        result = await db.execute(
            select(Client).where(func.lower(Client.email) == client_info.email.lower())
        )
        client = result.scalars().first()
        if client:
            return client

    client = Client(**client_info.model_dump(), created_by=user_id)
    db.add(client)
    await db.flush()
    return client
