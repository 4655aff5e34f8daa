"""
Modelo de cliente
Las ventas y servicios se asocian a un cliente
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base import Base


class Client(Base):
    """Cliente del taller"""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False, index=True, comment="Nombre o razón social")
    email = Column(String(120), index=True, comment="Correo")
    phone = Column(String(30), comment="Teléfono")
    address = Column(String(200), comment="Dirección")

    # Documentos: DNI (persona) y RUC (empresa)
    dni = Column(String(20), unique=True, index=True, nullable=True, comment="DNI")
    ruc = Column(String(20), index=True, comment="RUC")

    notes = Column(Text, comment="Notas")
    is_active = Column(Boolean, default=True, comment="Activo")

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User", foreign_keys=[created_by])
    orders = relationship("Order", back_populates="client")
    services = relationship("Service", back_populates="client")

    def __repr__(self):
        return f"<Client {self.id}: {self.name}>"

    @property
    def document_type(self) -> str:
        """Tipo de documento a mostrar en el comprobante"""
        if self.ruc:
            return "ruc"
        if self.dni:
            return "dni"
        return "doc"

    @property
    def document_number(self) -> str:
        return self.ruc or self.dni or "-"
