"""Gestión de productos"""

from typing import Any, Optional
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_db, require_roles
from app.models.order import OrderProduct
from app.models.product import Product
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.auth import MessageResponse
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse

router = APIRouter()


def _build_product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        price=float(product.price or 0),
        stock=product.stock or 0,
        sku=product.sku,
        category=product.category,
        image=product.image,
        is_active=product.is_active,
        low_stock=product.is_low_stock(settings.LOW_STOCK_THRESHOLD),
        created_by=product.created_by,
        created_at=product.created_at,
        updated_at=product.updated_at)


async def _ensure_unique_sku(db: AsyncSession, sku: Optional[str], exclude_id: Optional[int] = None):
    if not sku:
        return
    result = await db.execute(select(Product).where(Product.sku == sku))
    existing = result.scalar_one_or_none()
    if existing and existing.id != exclude_id:
        raise HTTPException(status_code=409, detail=f"Ya existe un producto con SKU {sku}")


# Columnas NOT NULL que un PATCH no puede vaciar
REQUIRED_FIELDS = ("name", "price", "stock", "is_active")


async def _commit_product(db: AsyncSession, product: Product):
    sku = product.sku
    try:
        await db.commit()
    except IntegrityError:
        # SKU registrado en paralelo
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"Ya existe un producto con SKU {sku}")
    await db.refresh(product)


@router.get("", response_model=ProductListResponse)
async def list_products(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN, ROLE_USER)),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    low_stock: Optional[bool] = Query(None, description="Solo productos con stock bajo"),
    is_active: Optional[bool] = Query(None)) -> Any:
    query = select(Product)
    if search:
        query = query.where(or_(
            Product.name.contains(search),
            Product.sku.contains(search),
            Product.description.contains(search),
        ))
    if category:
        query = query.where(Product.category == category)
    if low_stock:
        query = query.where(Product.stock <= settings.LOW_STOCK_THRESHOLD)
    if is_active is not None:
        query = query.where(Product.is_active == is_active)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    query = query.order_by(Product.name).offset((page - 1) * limit).limit(limit)
    products = (await db.execute(query)).scalars().all()

    return ProductListResponse(
        data=[_build_product_response(p) for p in products],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN, ROLE_USER)),
    product_id: int) -> Any:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")
    return _build_product_response(product)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    product_in: ProductCreate) -> Any:
    await _ensure_unique_sku(db, product_in.sku)

    data = product_in.model_dump()
    data["price"] = Decimal(str(data["price"]))
    product = Product(**data, created_by=current_user.id)
    db.add(product)
    await _commit_product(db, product)
    return _build_product_response(product)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    product_id: int,
    product_in: ProductUpdate) -> Any:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    update_data = product_in.model_dump(exclude_unset=True)
    await _ensure_unique_sku(db, update_data.get("sku"), exclude_id=product_id)

    if update_data.get("price") is not None:
        update_data["price"] = Decimal(str(update_data["price"]))

    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(product, field, value)

    await _commit_product(db, product)
    return _build_product_response(product)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    product_id: int) -> Any:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    # Productos ya vendidos se conservan por el historial de ventas
    used = (await db.execute(
        select(func.count(OrderProduct.id)).where(OrderProduct.product_id == product_id)
    )).scalar() or 0
    if used > 0:
        raise HTTPException(status_code=400, detail="El producto está asociado a ventas, no se puede eliminar")

    await db.delete(product)
    await db.commit()
    return {"message": "Producto eliminado correctamente"}
