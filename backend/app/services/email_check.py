"""
Validación de correos
Sintaxis y, si está habilitado, existencia del dominio (registros MX/A vía DNS)
"""

from email_validator import EmailNotValidError, validate_email
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)


def _check(email: str, check_deliverability: bool) -> bool:
    try:
        validate_email(email, check_deliverability=check_deliverability)
        return True
    except EmailNotValidError as e:
        logger.info(f"Correo rechazado {email}: {e}")
        return False


async def is_email_valid(email: str) -> bool:
    """True si el correo es válido y su dominio existe"""
    # La consulta DNS es bloqueante
    return await run_in_threadpool(_check, email, settings.EMAIL_CHECK_DELIVERABILITY)
