"""Schemas de autenticación"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.schemas.user import UserSummary


class RegisterRequest(BaseModel):
    """Registro público"""
    email: EmailStr = Field(..., description="Correo electrónico")
    password: str = Field(..., min_length=6, description="Contraseña")
    name: str = Field(..., min_length=1, max_length=100, description="Nombre")
    username: str = Field(..., min_length=3, max_length=50, description="Nombre de usuario")
    phone: Optional[str] = Field(None, max_length=30, description="Teléfono")
    birthdate: Optional[date] = Field(None, description="Fecha de nacimiento")
    language: Optional[str] = Field(None, max_length=20, description="Idioma, por defecto Accept-Language")
    timezone: Optional[str] = Field(None, max_length=50, description="Zona horaria, por defecto UTC")


class RegisterResponse(BaseModel):
    id: int
    email: str
    name: str
    username: str
    phone: str
    verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UsernameLoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenPair):
    user: UserSummary


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class MessageResponse(BaseModel):
    message: str
