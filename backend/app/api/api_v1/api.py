"""Agregación de rutas de la API"""
from fastapi import APIRouter

from app.api.api_v1.endpoints import (
    auth, users, clients, products, services, dashboard
)
# Ventas en módulo dividido
from app.api.api_v1.endpoints.orders import crud as orders_crud
from app.api.api_v1.endpoints.orders import actions as orders_actions
from app.api.api_v1.endpoints.orders import receipts as orders_receipts

api_router = APIRouter()

# Acceso y usuarios
api_router.include_router(auth.router, prefix="/auth", tags=["Autenticación"])
api_router.include_router(users.router, prefix="/users", tags=["Usuarios"])

# Negocio
api_router.include_router(clients.router, prefix="/clients", tags=["Clientes"])
api_router.include_router(products.router, prefix="/products", tags=["Productos"])
api_router.include_router(services.router, prefix="/services", tags=["Servicios"])
# Las rutas de ventas usan "" como raíz, el prefijo va en cada router
for orders_module in (orders_crud, orders_actions, orders_receipts):
    api_router.include_router(orders_module.router, prefix="/orders", tags=["Ventas"])

# Panel
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Panel"])
