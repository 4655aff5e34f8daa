"""Gestión de usuarios del sistema"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_db, get_current_user, require_roles
from app.models.user import User, ROLE_ADMIN
from app.schemas.auth import MessageResponse
from app.schemas.user import UserCreate, UserUpdate, UserResponse, UserListResponse
from app.services import user_service

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    user_in: UserCreate) -> Any:
    """Crear usuario del personal (rol USER, verificado)"""
    return await user_service.create_staff_user(db, user_in)


@router.get("", response_model=UserListResponse)
async def list_users(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[str] = Query(None, pattern="^(ADMIN|USER)$"),
    search: Optional[str] = Query(None)) -> Any:
    users, total = await user_service.list_users(db, page, limit, role=role, search=search)
    return UserListResponse(
        data=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        limit=limit
    )


@router.get("/me", response_model=UserResponse)
async def read_me(
    current_user: User = Depends(get_current_user)) -> Any:
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    user_id: int) -> Any:
    user = await user_service.find_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    *,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    user_id: int,
    user_in: UserUpdate) -> Any:
    user = await user_service.find_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return await user_service.update_user(db, user, user_in)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    *,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    user_id: int) -> Any:
    """Eliminar usuario; si tiene ventas o servicios solo se desactiva"""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="No puedes eliminar tu propia cuenta")

    user = await user_service.find_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")

    deleted = await user_service.delete_user(db, user)
    if not deleted:
        return {"message": "El usuario tiene registros asociados y fue desactivado"}
    return {"message": "Usuario eliminado correctamente"}
