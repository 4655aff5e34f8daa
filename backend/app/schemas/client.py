"""Schemas de cliente"""
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class ClientBase(BaseModel):
    """Campos comunes"""
    name: str = Field(..., min_length=1, max_length=100, description="Nombre o razón social")
    email: Optional[EmailStr] = Field(None, description="Correo")
    phone: Optional[str] = Field(None, max_length=30, description="Teléfono")
    address: Optional[str] = Field(None, max_length=200, description="Dirección")
    dni: Optional[str] = Field(None, min_length=8, max_length=20, description="DNI")
    ruc: Optional[str] = Field(None, min_length=11, max_length=20, description="RUC")
    notes: Optional[str] = Field(None, description="Notas")


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    dni: Optional[str] = Field(None, min_length=8, max_length=20)
    ruc: Optional[str] = Field(None, min_length=11, max_length=20)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class ClientResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    dni: Optional[str] = None
    ruc: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClientListResponse(BaseModel):
    data: List[ClientResponse]
    total: int
    page: int
    limit: int
