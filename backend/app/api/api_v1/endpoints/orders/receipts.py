"""Comprobante de venta"""

from typing import Any
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db, require_roles
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.order import ReceiptResponse
from app.services.receipt import build_receipt, render_receipt_text

from .core import get_order_or_404, ensure_can_view

router = APIRouter()

staff = require_roles(ROLE_ADMIN, ROLE_USER)


@router.get("/{order_id}/receipt", response_model=ReceiptResponse)
async def get_receipt(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    order_id: int) -> Any:
    order = await get_order_or_404(db, order_id)
    ensure_can_view(order, current_user)
    return build_receipt(order)


@router.get("/{order_id}/receipt.txt", response_class=PlainTextResponse)
async def get_receipt_text(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(staff),
    order_id: int) -> Any:
    """Comprobante para impresora térmica de 80 mm"""
    order = await get_order_or_404(db, order_id)
    ensure_can_view(order, current_user)
    return PlainTextResponse(render_receipt_text(build_receipt(order)))
