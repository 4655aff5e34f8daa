"""Autenticación: registro, login, tokens, verificación y contraseñas"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_db, get_current_user
from app.core.logging_config import get_logger
from app.core.security import (
    PASSWORD_POLICY_MESSAGE, get_password_hash, is_strong_password, verify_password
)
from app.models.user import User
from app.schemas.auth import (
    RegisterRequest, RegisterResponse, LoginRequest, UsernameLoginRequest,
    LoginResponse, TokenPair, RefreshRequest, ChangePasswordRequest,
    PasswordResetRequest, ResetPasswordRequest, MessageResponse
)
from app.services import auth_service, user_service

logger = get_logger(__name__)

router = APIRouter()

RESET_REQUESTED_MESSAGE = "Si el correo está registrado, recibirás un enlace para restablecer tu contraseña"


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _preferred_language(request: Request) -> str:
    """Primer idioma de Accept-Language, sin región ni peso"""
    header = request.headers.get("accept-language")
    if not header:
        return "es"
    first = header.split(",")[0].split(";")[0].strip()
    return first.split("-")[0].lower() or "es"


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    *,
    db: AsyncSession = Depends(get_db),
    request: Request,
    user_in: RegisterRequest) -> Any:
    """Registro público; envía el enlace de verificación por correo"""
    return await auth_service.register(
        db,
        email=user_in.email,
        password=user_in.password,
        name=user_in.name,
        username=user_in.username,
        phone=user_in.phone,
        birthdate=user_in.birthdate,
        language=user_in.language or _preferred_language(request),
        timezone=user_in.timezone or "UTC",
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    *,
    db: AsyncSession = Depends(get_db),
    request: Request,
    credentials: LoginRequest) -> Any:
    user = await auth_service.validate_user(db, credentials.email, credentials.password)
    return await auth_service.login(db, user, _client_ip(request))


@router.post("/login/username", response_model=LoginResponse)
async def login_with_username(
    *,
    db: AsyncSession = Depends(get_db),
    request: Request,
    credentials: UsernameLoginRequest) -> Any:
    """Login del personal (rol USER) con nombre de usuario"""
    user = await auth_service.validate_user_by_username(db, credentials.username, credentials.password)
    return await auth_service.login(db, user, _client_ip(request))


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    *,
    db: AsyncSession = Depends(get_db),
    body: RefreshRequest) -> Any:
    return await auth_service.refresh_tokens(db, body.refresh_token)


@router.get("/verify", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def verify_email(
    *,
    db: AsyncSession = Depends(get_db),
    token: str = Query(..., min_length=1)) -> RedirectResponse:
    """Confirma el correo y redirige al frontend"""
    frontend = settings.FRONTEND_URL.rstrip("/")
    try:
        await auth_service.verify_email(db, token)
    except HTTPException:
        return RedirectResponse(f"{frontend}/verify-email?error=invalid_token")
    return RedirectResponse(f"{frontend}/login?verified=true")


@router.patch("/change-password", response_model=MessageResponse)
async def change_password(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    body: ChangePasswordRequest) -> Any:
    if not verify_password(body.current_password, current_user.password):
        raise HTTPException(status_code=403, detail="La contraseña actual es incorrecta")

    if body.new_password == body.current_password:
        raise HTTPException(status_code=400, detail="La nueva contraseña debe ser diferente a la actual")

    if not is_strong_password(body.new_password):
        raise HTTPException(status_code=400, detail=PASSWORD_POLICY_MESSAGE)

    await user_service.update_password(db, current_user, get_password_hash(body.new_password))

    logger.info(f"🔑 Contraseña cambiada: {current_user.email}")
    return {"message": "Contraseña actualizada correctamente"}


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(
    *,
    db: AsyncSession = Depends(get_db),
    body: PasswordResetRequest) -> Any:
    await auth_service.request_password_reset(db, body.email)
    return {"message": RESET_REQUESTED_MESSAGE}


@router.patch("/reset-password", response_model=MessageResponse)
async def reset_password(
    *,
    db: AsyncSession = Depends(get_db),
    body: ResetPasswordRequest) -> Any:
    await auth_service.reset_password(db, body.token, body.new_password)
    return {"message": "Contraseña restablecida correctamente"}
