"""
Acciones sobre ventas
- Anulación con credenciales de quien autoriza
"""

from typing import Any
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db, require_roles
from app.core.logging_config import get_logger
from app.core.security import verify_password
from app.models.order import ORDER_CANCELLED
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.order import OrderCancel, OrderResponse
from app.services import user_service

from .core import build_order_response, load_order, get_order_or_404
from .stock_ops import restore_stock, cancel_unpaid_services

logger = get_logger(__name__)

router = APIRouter()


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_USER)),
    order_id: int,
    cancel_in: OrderCancel) -> Any:
    """
    Anular una venta.

    Las credenciales enviadas deben ser de un administrador o del vendedor
    que registró la venta. Devuelve el stock y anula los servicios no cobrados.
    """
    order = await get_order_or_404(db, order_id)

    if order.is_cancelled:
        raise HTTPException(status_code=400, detail="La venta ya está anulada")

    authorizer = await user_service.find_by_email(db, cancel_in.email)
    if (not authorizer or not authorizer.is_active
            or not verify_password(cancel_in.password, authorizer.password)):
        raise HTTPException(status_code=401, detail="Credenciales inválidas")

    if not authorizer.is_admin and authorizer.id != order.user_id:
        raise HTTPException(status_code=403, detail="No tienes permiso para anular esta venta")

    await restore_stock(db, order)
    cancelled_services = cancel_unpaid_services(order)

    order.status = ORDER_CANCELLED
    order.cancelled_at = datetime.utcnow()
    order.cancelled_by = authorizer.id
    order.cancellation_reason = cancel_in.reason
    await db.commit()

    logger.info(
        f"❌ Venta anulada: {order.order_no} por {authorizer.email} "
        f"(solicitada por usuario {current_user.id}, {cancelled_services} servicios anulados)"
    )

    order = await load_order(db, order_id)
    return build_order_response(order)
