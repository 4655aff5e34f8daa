"""
Modelo de venta (orden)

Una orden agrupa productos vendidos y servicios contratados por un cliente.
Estados:
- PENDING: registrada, pendiente de cobro/entrega
- COMPLETED: cobrada
- CANCELLED: anulada (el stock se devuelve)
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from app.db.base import Base


ORDER_PENDING = "PENDING"
ORDER_COMPLETED = "COMPLETED"
ORDER_CANCELLED = "CANCELLED"
ORDER_STATUSES = (ORDER_PENDING, ORDER_COMPLETED, ORDER_CANCELLED)

PAYMENT_METHODS = ("CASH", "CARD", "TRANSFER", "YAPE", "PLIN", "OTHER")


class Order(Base):
    """Venta"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    # Formato: OV{AAAAMMDD}{secuencia}, ej. OV20250101001
    order_no = Column(String(30), unique=True, nullable=False, index=True, comment="Número de orden")

    status = Column(String(20), nullable=False, default=ORDER_PENDING, index=True, comment="Estado")
    payment_method = Column(String(20), nullable=False, default="CASH", comment="Medio de pago")

    total_amount = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="Total")

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    notes = Column(Text, comment="Notas")

    completed_at = Column(DateTime, comment="Fecha de cobro")
    cancelled_at = Column(DateTime, comment="Fecha de anulación")
    cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(String(200), comment="Motivo de anulación")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="orders")
    user = relationship("User", back_populates="orders", foreign_keys=[user_id])
    canceller = relationship("User", foreign_keys=[cancelled_by])

    products = relationship("OrderProduct", back_populates="order", cascade="all, delete-orphan")
    services = relationship("Service", back_populates="order")

    def __repr__(self):
        return f"<Order {self.order_no} ({self.status}: {self.total_amount})>"

    @property
    def is_cancelled(self) -> bool:
        return self.status == ORDER_CANCELLED

    @property
    def status_display(self) -> str:
        status_map = {
            ORDER_PENDING: "Pendiente",
            ORDER_COMPLETED: "Completado",
            ORDER_CANCELLED: "Cancelado",
        }
        return status_map.get(self.status, self.status)

    @property
    def payment_method_display(self) -> str:
        method_map = {
            "CASH": "Efectivo",
            "CARD": "Tarjeta",
            "TRANSFER": "Transferencia",
            "YAPE": "Yape",
            "PLIN": "Plin",
            "OTHER": "Otro",
        }
        return method_map.get(self.payment_method, self.payment_method)

    def recalculate_total(self):
        """Recalcula el total a partir de productos y servicios"""
        products_total = sum((item.subtotal or Decimal("0")) for item in self.products)
        services_total = sum((service.price or Decimal("0")) for service in self.services)
        self.total_amount = products_total + services_total


class OrderProduct(Base):
    """Línea de producto vendida; nombre y precio quedan congelados al vender"""
    __tablename__ = "order_products"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    name = Column(String(100), nullable=False, comment="Nombre al momento de la venta")
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="Precio unitario")
    subtotal = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"))

    created_at = Column(DateTime, default=datetime.utcnow)

    order = relationship("Order", back_populates="products")
    product = relationship("Product", back_populates="order_products")

    def __repr__(self):
        return f"<OrderProduct {self.product_id} x {self.quantity} @ {self.price}>"

    def calculate(self):
        self.subtotal = Decimal(self.quantity) * Decimal(str(self.price))
