"""
Movimientos de stock de ventas
- Descuento al vender
- Devolución al anular o borrar
"""

from typing import Dict, List, Tuple
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.models.order import Order
from app.models.product import Product
from app.models.service import SERVICE_CANCELLED, SERVICE_PAID
from app.schemas.order import OrderProductCreate

logger = get_logger(__name__)


async def take_stock(
    db: AsyncSession,
    items: List[OrderProductCreate]) -> List[Tuple[Product, OrderProductCreate]]:
    """
    Valida y descuenta el stock de las líneas de una venta.

    Se valida todo antes de descontar; un mismo producto repetido en varias
    líneas se controla por la suma de cantidades.
    """
    products: Dict[int, Product] = {}
    requested: Dict[int, int] = {}

    for item in items:
        product = products.get(item.product_id) or await db.get(Product, item.product_id)
        if not product:
            raise HTTPException(status_code=404, detail=f"Producto {item.product_id} no encontrado")
        products[item.product_id] = product
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

    for product_id, quantity in requested.items():
        product = products[product_id]
        if (product.stock or 0) < quantity:
            raise HTTPException(
                status_code=400,
                detail=f"Stock insuficiente para {product.name}: disponible {product.stock}, solicitado {quantity}"
            )

    for product_id, quantity in requested.items():
        products[product_id].stock -= quantity

    return [(products[item.product_id], item) for item in items]


async def restore_stock(db: AsyncSession, order: Order) -> None:
    """Devuelve al stock las cantidades vendidas; los productos deben venir cargados en la orden"""
    for item in order.products:
        product = await db.get(Product, item.product_id)
        if not product:
            # Producto borrado: nada que devolver
            continue
        product.stock = (product.stock or 0) + item.quantity
        logger.info(f"📦 Stock devuelto: {product.name} +{item.quantity} (venta {order.order_no})")


def cancel_unpaid_services(order: Order) -> int:
    """Anula los servicios de la venta que aún no se cobraron"""
    cancelled = 0
    for service in order.services:
        if service.paid or service.status in (SERVICE_PAID, SERVICE_CANCELLED):
            continue
        service.status = SERVICE_CANCELLED
        cancelled += 1
    return cancelled
