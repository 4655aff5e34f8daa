"""Schemas del panel principal"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class SalesSummary(BaseModel):
    total: float = 0.0
    count: int = 0
    average: float = 0.0


class ProductsSummary(BaseModel):
    total_products: int = 0
    low_stock_items: int = 0


class RecentActivity(BaseModel):
    id: int
    type: Literal["sale", "service"]
    amount: Optional[float] = None
    status: Optional[str] = None
    description: Optional[str] = None
    customer_name: Optional[str] = None
    items_count: Optional[int] = None
    created_at: datetime


class DashboardStats(BaseModel):
    sales_summary: SalesSummary
    products_summary: ProductsSummary
    active_services: int = 0
    total_customers: int = 0
    recent_activity: List[RecentActivity] = Field(default_factory=list)
