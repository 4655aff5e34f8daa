from typing import Annotated, List, Optional, Union
import json
import logging

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")

    PROJECT_NAME: str = "Tecnicentro JR"
    API_PREFIX: str = ""

    # Importante: en producción debe definirse vía .env o variable de entorno
    SECRET_KEY: str = Field(
        default="dev-only-secret-key-please-change-in-production",
        description="Clave de firma JWT, cambiar en producción"
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    VERIFY_TOKEN_EXPIRE_HOURS: int = 24
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = 30

    FRONTEND_URL: str = "http://localhost:3000"
    # URL pública del backend (enlace de verificación)
    BACKEND_URL: str = "http://localhost:8000"

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[Union[str, AnyHttpUrl]], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Base de datos
    SQLITE_DATABASE_URI: str = "sqlite:///./tecnicentro.db"

    # Validación de correo (consulta DNS del dominio)
    EMAIL_CHECK_DELIVERABILITY: bool = True

    # Correo saliente (API HTTP); sin clave los mensajes solo se registran en el log
    MAIL_API_URL: str = "https://api.resend.com/emails"
    MAIL_API_KEY: Optional[str] = None
    MAIL_FROM: str = "Tecnicentro JR <no-reply@tecnicentrojr.com>"
    MAIL_TIMEOUT_SECONDS: float = 10.0

    # Limpieza de cuentas sin verificar
    USER_CLEANUP_ENABLED: bool = True
    USER_CLEANUP_INTERVAL_MINUTES: int = 60

    # Panel
    LOW_STOCK_THRESHOLD: int = 5

    # Cabecera del comprobante
    BUSINESS_NAME: str = "TECNICENTRO JR"
    BUSINESS_ADDRESS: str = "Av. Principal 123"
    BUSINESS_PHONE: str = "000-000-000"
    BUSINESS_CUIT: str = "00000000000"
    BUSINESS_EMAIL: str = "contacto@tecnicentrojr.com"
    RECEIPT_FOOTER: str = "Conserve este comprobante"

    @property
    def async_database_uri(self) -> str:
        if self.SQLITE_DATABASE_URI.startswith("sqlite:///"):
            return self.SQLITE_DATABASE_URI.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.SQLITE_DATABASE_URI


settings = Settings()
logger.info(f"Configuración cargada: PROJECT_NAME={settings.PROJECT_NAME}, CORS={settings.BACKEND_CORS_ORIGINS}")
