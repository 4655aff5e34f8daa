"""Schemas de producto"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


class ProductBase(BaseModel):
    """Campos comunes"""
    name: str = Field(..., min_length=1, max_length=100, description="Nombre")
    description: Optional[str] = Field(None, description="Descripción")
    price: float = Field(..., gt=0, description="Precio de venta")
    stock: int = Field(default=0, ge=0, description="Stock")
    sku: Optional[str] = Field(None, max_length=50, description="SKU")
    category: Optional[str] = Field(None, max_length=50, description="Categoría")
    image: Optional[str] = Field(None, max_length=500, description="URL de imagen")


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=50)
    category: Optional[str] = Field(None, max_length=50)
    image: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class ProductResponse(ProductBase):
    id: int
    is_active: bool = True
    low_stock: bool = False
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    data: List[ProductResponse]
    total: int
    page: int
    limit: int
