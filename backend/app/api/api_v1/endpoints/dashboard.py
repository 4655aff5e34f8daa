"""Panel principal"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.deps import get_db, get_current_user
from app.models.client import Client
from app.models.order import Order, ORDER_CANCELLED
from app.models.product import Product
from app.models.service import Service, ACTIVE_SERVICE_STATUSES
from app.models.user import User
from app.schemas.dashboard import DashboardStats, SalesSummary, ProductsSummary, RecentActivity

router = APIRouter()

RECENT_ACTIVITY_LIMIT = 10


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user)) -> Any:
    """Resumen de ventas, productos, servicios y clientes"""
    # Ventas no anuladas
    sales_row = (await db.execute(
        select(
            func.coalesce(func.sum(Order.total_amount), 0),
            func.count(Order.id)
        ).where(Order.status != ORDER_CANCELLED)
    )).first()
    sales_total = float(sales_row[0]) if sales_row else 0.0
    sales_count = int(sales_row[1]) if sales_row else 0

    total_products = (await db.execute(select(func.count(Product.id)))).scalar() or 0
    low_stock_items = (await db.execute(
        select(func.count(Product.id)).where(Product.stock <= settings.LOW_STOCK_THRESHOLD)
    )).scalar() or 0

    active_services = (await db.execute(
        select(func.count(Service.id)).where(Service.status.in_(ACTIVE_SERVICE_STATUSES))
    )).scalar() or 0

    total_customers = (await db.execute(select(func.count(Client.id)))).scalar() or 0

    # Actividad reciente: últimas ventas y servicios mezclados por fecha
    recent_orders = (await db.execute(
        select(Order)
        .options(selectinload(Order.client), selectinload(Order.products))
        .order_by(Order.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    )).scalars().all()
    recent_services = (await db.execute(
        select(Service)
        .options(selectinload(Service.client))
        .order_by(Service.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    )).scalars().all()

    activity = [
        RecentActivity(
            id=o.id,
            type="sale",
            amount=float(o.total_amount or 0),
            status=o.status,
            description=o.order_no,
            customer_name=o.client.name if o.client else None,
            items_count=sum(item.quantity for item in o.products),
            created_at=o.created_at)
        for o in recent_orders
    ] + [
        RecentActivity(
            id=s.id,
            type="service",
            amount=float(s.price or 0),
            status=s.status,
            description=s.name,
            customer_name=s.client.name if s.client else None,
            created_at=s.created_at)
        for s in recent_services
    ]
    activity.sort(key=lambda a: a.created_at, reverse=True)

    return DashboardStats(
        sales_summary=SalesSummary(
            total=sales_total,
            count=sales_count,
            average=round(sales_total / sales_count, 2) if sales_count else 0.0
        ),
        products_summary=ProductsSummary(
            total_products=total_products,
            low_stock_items=low_stock_items
        ),
        active_services=active_services,
        total_customers=total_customers,
        recent_activity=activity[:RECENT_ACTIVITY_LIMIT]
    )
