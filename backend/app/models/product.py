"""
Modelo de producto
Repuestos y accesorios que se venden en mostrador
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from app.db.base import Base


class Product(Base):
    """Producto con precio de venta y stock"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False, index=True, comment="Nombre")
    description = Column(Text, comment="Descripción")
    sku = Column(String(50), unique=True, index=True, nullable=True, comment="SKU")
    category = Column(String(50), index=True, comment="Categoría")
    image = Column(String(500), comment="URL de imagen")

    price = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="Precio de venta")
    stock = Column(Integer, nullable=False, default=0, comment="Stock disponible")

    is_active = Column(Boolean, default=True, comment="Activo")

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User", foreign_keys=[created_by])
    order_products = relationship("OrderProduct", back_populates="product")

    def __repr__(self):
        return f"<Product {self.id}: {self.name} x{self.stock} @ {self.price}>"

    def is_low_stock(self, threshold: int) -> bool:
        return (self.stock or 0) <= threshold
