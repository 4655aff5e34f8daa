# Modelos ORM; importarlos aquí registra todas las tablas en Base.metadata

from app.models.user import User
from app.models.client import Client
from app.models.product import Product
from app.models.order import Order, OrderProduct
from app.models.service import Service

__all__ = [
    "User",
    "Client",
    "Product",
    "Order",
    "OrderProduct",
    "Service",
]
