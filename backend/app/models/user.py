from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime
from sqlalchemy.orm import relationship

from app.db.base import Base


ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"
ROLES = (ROLE_ADMIN, ROLE_USER)

STATUS_ACTIVE = "ACTIVE"
STATUS_INACTIVE = "INACTIVE"
USER_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)

DEFAULT_PHONE = "sin_telefono"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(120), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False, default=DEFAULT_PHONE)
    birthdate = Column(Date, nullable=True)
    language = Column(String(20), nullable=False, default="es")
    timezone = Column(String(50), nullable=False, default="UTC")

    role = Column(String(20), nullable=False, default=ROLE_USER)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)

    # Verificación de correo
    verified = Column(Boolean, nullable=False, default=False)
    verify_token = Column(String(64), index=True, nullable=True)
    verify_token_expires = Column(DateTime, nullable=True)

    # Restablecimiento de contraseña
    password_reset_token = Column(String(64), index=True, nullable=True)
    password_reset_token_expires = Column(DateTime, nullable=True)
    password_changed_at = Column(DateTime, nullable=True)

    last_login_at = Column(DateTime, nullable=True)
    last_login_ip = Column(String(64), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = relationship("Order", back_populates="user", foreign_keys="Order.user_id")
    services = relationship("Service", back_populates="user")

    def __repr__(self):
        return f"<User {self.id}: {self.email} ({self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def role_display(self) -> str:
        return {ROLE_ADMIN: "Administrador", ROLE_USER: "Usuario"}.get(self.role, self.role)
