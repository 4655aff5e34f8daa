from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)


# Alta de personal por un administrador (rol USER, ya verificado)
class UserCreate(UserBase):
    password: str
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    role: Optional[str] = Field(None, pattern="^(ADMIN|USER)$")
    status: Optional[str] = Field(None, pattern="^(ACTIVE|INACTIVE)$")
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    username: str
    phone: str
    birthdate: Optional[date] = None
    language: str
    timezone: str
    role: str
    status: str
    verified: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    data: List[UserResponse]
    total: int
    page: int
    limit: int


# Resumen incluido en la respuesta de login
class UserSummary(BaseModel):
    id: int
    email: str
    name: str
    role: str
    verified: bool

    class Config:
        from_attributes = True
