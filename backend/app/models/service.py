"""
Modelo de servicio técnico
Reparaciones, mantenimientos e instalaciones registrados desde una venta o de forma directa
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, DECIMAL, JSON
from sqlalchemy.orm import relationship
from app.db.base import Base


SERVICE_TYPES = ("REPAIR", "MAINTENANCE", "INSTALLATION", "OTHER")

SERVICE_PENDING = "PENDING"
SERVICE_IN_PROGRESS = "IN_PROGRESS"
SERVICE_COMPLETED = "COMPLETED"
SERVICE_DELIVERED = "DELIVERED"
SERVICE_PAID = "PAID"
SERVICE_CANCELLED = "CANCELLED"
SERVICE_STATUSES = (
    SERVICE_PENDING,
    SERVICE_IN_PROGRESS,
    SERVICE_COMPLETED,
    SERVICE_DELIVERED,
    SERVICE_PAID,
    SERVICE_CANCELLED,
)
ACTIVE_SERVICE_STATUSES = (SERVICE_PENDING, SERVICE_IN_PROGRESS)


class Service(Base):
    """Servicio técnico"""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False, comment="Nombre")
    description = Column(Text, comment="Descripción del trabajo")
    price = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="Precio")
    type = Column(String(20), nullable=False, default="OTHER", comment="Tipo")
    status = Column(String(20), nullable=False, default=SERVICE_PENDING, index=True, comment="Estado")
    paid = Column(Boolean, nullable=False, default=False, comment="Pagado")

    # Lista de URLs de fotos del equipo
    photo_urls = Column(JSON, nullable=False, default=list)

    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = relationship("Order", back_populates="services")
    client = relationship("Client", back_populates="services")
    user = relationship("User", back_populates="services")

    def __repr__(self):
        return f"<Service {self.id}: {self.name} ({self.status})>"

    @property
    def status_display(self) -> str:
        status_map = {
            SERVICE_PENDING: "Pendiente",
            SERVICE_IN_PROGRESS: "En progreso",
            SERVICE_COMPLETED: "Completado",
            SERVICE_DELIVERED: "Entregado",
            SERVICE_PAID: "Pagado",
            SERVICE_CANCELLED: "Cancelado",
        }
        return status_map.get(self.status, self.status)

    @property
    def type_display(self) -> str:
        type_map = {
            "REPAIR": "Reparación",
            "MAINTENANCE": "Mantenimiento",
            "INSTALLATION": "Instalación",
            "OTHER": "Otro",
        }
        return type_map.get(self.type, self.type)
