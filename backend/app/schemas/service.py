"""Schemas de servicio técnico"""
from typing import Optional, List, Literal
from pydantic import BaseModel, Field
from datetime import datetime


ServiceType = Literal["REPAIR", "MAINTENANCE", "INSTALLATION", "OTHER"]


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Nombre")
    description: Optional[str] = Field(None, description="Descripción del trabajo")
    price: float = Field(..., ge=0, description="Precio")
    type: ServiceType = Field(default="OTHER", description="Tipo de servicio")
    photo_urls: List[str] = Field(default_factory=list, description="Fotos del equipo")


class ServiceCreate(ServiceBase):
    client_id: Optional[int] = Field(None, description="Cliente")


class ServiceUpdate(BaseModel):
    """Actualización parcial; el estado se valida en el endpoint (400 si no existe)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    type: Optional[ServiceType] = None
    status: Optional[str] = None
    paid: Optional[bool] = None
    photo_urls: Optional[List[str]] = None


class ServiceResponse(ServiceBase):
    id: int
    status: str
    status_display: str = ""
    type_display: str = ""
    paid: bool
    order_id: Optional[int] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    user_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ServiceEnvelope(BaseModel):
    data: ServiceResponse


class ServiceListResponse(BaseModel):
    data: List[ServiceResponse]
    total: int
    page: int
    limit: int
    total_pages: int
