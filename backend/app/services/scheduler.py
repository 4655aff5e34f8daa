"""
Servicio de tareas programadas
Usa APScheduler para la limpieza periódica de cuentas sin verificar
"""

import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.db.session import SessionLocal
from app.services.auth_service import purge_unverified_users

logger = logging.getLogger(__name__)

# Instancia global del planificador
scheduler: Optional[AsyncIOScheduler] = None


async def cleanup_unverified_users() -> int:
    """Elimina las cuentas cuyo enlace de verificación venció"""
    try:
        async with SessionLocal() as db:
            return await purge_unverified_users(db)
    except Exception as e:
        # La tarea no debe detener el planificador
        logger.error(f"❌ Limpieza de usuarios fallida: {str(e)}")
        return 0


def init_scheduler():
    """Inicializa y arranca el planificador"""
    global scheduler

    if not settings.USER_CLEANUP_ENABLED:
        logger.info("🧹 Limpieza de usuarios deshabilitada")
        return

    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        cleanup_unverified_users,
        trigger=IntervalTrigger(minutes=settings.USER_CLEANUP_INTERVAL_MINUTES),
        id="cleanup_unverified_users",
        name="Limpieza de usuarios sin verificar",
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"⏰ Planificador iniciado - limpieza de usuarios cada {settings.USER_CLEANUP_INTERVAL_MINUTES} min")


def shutdown_scheduler():
    """Detiene el planificador"""
    global scheduler
    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("⏰ Planificador detenido")


def get_scheduler_status() -> dict:
    """Estado del planificador"""
    global scheduler
    if not scheduler:
        return {
            "enabled": False,
            "running": False,
            "jobs": []
        }

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None
        })

    return {
        "enabled": settings.USER_CLEANUP_ENABLED,
        "running": scheduler.running,
        "jobs": jobs
    }
