"""Schemas de venta"""
from typing import Optional, List, Literal
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

from app.schemas.service import ServiceResponse, ServiceType


PaymentMethod = Literal["CASH", "CARD", "TRANSFER", "YAPE", "PLIN", "OTHER"]


# ===== Datos de cliente en línea =====
class ClientInfo(BaseModel):
    """Cliente capturado en el formulario de venta; se busca por DNI y luego por correo"""
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    dni: Optional[str] = Field(None, min_length=8, max_length=20)
    ruc: Optional[str] = Field(None, min_length=11, max_length=20)
    notes: Optional[str] = None


# ===== Líneas =====
class OrderProductCreate(BaseModel):
    product_id: int = Field(..., description="Producto")
    quantity: int = Field(..., gt=0, description="Cantidad")
    unit_price: Optional[float] = Field(None, gt=0, description="Precio unitario; por defecto el del producto")


class OrderServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    type: ServiceType = "OTHER"
    photo_urls: List[str] = Field(default_factory=list)


class OrderProductResponse(BaseModel):
    id: int
    product_id: int
    name: str
    quantity: int
    price: float
    subtotal: float

    class Config:
        from_attributes = True


# ===== Orden =====
class OrderCreate(BaseModel):
    client_id: Optional[int] = Field(None, description="Cliente existente")
    client_info: Optional[ClientInfo] = Field(None, description="Cliente nuevo o a buscar")
    products: List[OrderProductCreate] = Field(default_factory=list)
    services: List[OrderServiceCreate] = Field(default_factory=list)
    payment_method: PaymentMethod = "CASH"
    status: Literal["PENDING", "COMPLETED"] = "PENDING"
    notes: Optional[str] = None


class OrderUpdate(BaseModel):
    status: Optional[str] = Field(None, description="PENDING o COMPLETED; para anular usar /cancel")
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None


class OrderCancel(BaseModel):
    """Credenciales de quien autoriza la anulación"""
    email: EmailStr
    password: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=200)


class OrderResponse(BaseModel):
    id: int
    order_no: str
    status: str
    status_display: str = ""
    payment_method: str
    payment_method_display: str = ""
    total_amount: float
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    user_id: int
    user_name: str = ""
    notes: Optional[str] = None
    products: List[OrderProductResponse] = Field(default_factory=list)
    services: List[ServiceResponse] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    data: List[OrderResponse]
    total: int
    page: int
    limit: int


# ===== Comprobante =====
class BusinessInfo(BaseModel):
    name: str
    address: str
    phone: str
    cuit: str
    email: str
    footer_text: str


class ReceiptCustomer(BaseModel):
    name: str
    document_type: str
    document_number: str
    phone: Optional[str] = None


class ReceiptItem(BaseModel):
    name: str
    quantity: int
    price: float
    amount: float
    type: Literal["product", "service"]
    notes: Optional[str] = None


class ReceiptResponse(BaseModel):
    order_id: int
    order_number: str
    issued_at: datetime
    business: BusinessInfo
    customer: ReceiptCustomer
    items: List[ReceiptItem]
    subtotal: float
    total: float
    payment_method: str
    status: str
    has_services: bool
