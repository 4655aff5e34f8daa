from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

from app.api.api_v1.api import api_router
from app.core.config import settings
from app.core.logging_config import setup_logging, get_logger
from app.services.scheduler import init_scheduler, shutdown_scheduler, get_scheduler_status
from app.db.init_db import ensure_tables_exist

# Inicializar logging
log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ciclo de vida de la aplicación"""
    # Arranque
    logger.info("🚀 Iniciando aplicación...")

    # Asegurar que las tablas existan
    try:
        await ensure_tables_exist()
        logger.info("📊 Tablas de base de datos listas")
    except Exception as e:
        logger.warning(f"Aviso al inicializar tablas: {e}")

    init_scheduler()
    yield
    # Cierre
    logger.info("🛑 Deteniendo aplicación...")
    shutdown_scheduler()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    description="Gestión de servicios técnicos, ventas, clientes y productos",
    lifespan=lifespan
)

# CORS
if settings.BACKEND_CORS_ORIGINS:
    logger.info(f"Configurando CORS, orígenes permitidos: {settings.BACKEND_CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

logger.info(f"Registrando rutas de la API, prefijo: '{settings.API_PREFIX}'")
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} API"}


@app.get("/health")
async def health():
    return {"status": "ok", "scheduler": get_scheduler_status()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
