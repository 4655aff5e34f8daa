"""
Envío de correos transaccionales
Usa una API HTTP de correo (formato Resend). Sin MAIL_API_KEY el mensaje solo se registra en el log.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)


async def send_email(to: str, subject: str, html: str) -> bool:
    """
    Envía un correo. Nunca lanza: un fallo de envío no debe romper la petición que lo originó.

    Returns:
        True si la API aceptó el mensaje
    """
    if not settings.MAIL_API_KEY:
        logger.info(f"✉️ [sin API de correo] Para: {to} | Asunto: {subject}\n{html}")
        return False

    payload = {
        "from": settings.MAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    headers = {"Authorization": f"Bearer {settings.MAIL_API_KEY}"}

    try:
        async with httpx.AsyncClient(timeout=settings.MAIL_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.MAIL_API_URL, json=payload, headers=headers)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"❌ No se pudo enviar correo a {to}: {e}")
        return False

    logger.info(f"✉️ Correo enviado a {to}: {subject}")
    return True


def build_verification_link(token: str) -> str:
    return f"{settings.BACKEND_URL.rstrip('/')}{settings.API_PREFIX}/auth/verify?{urlencode({'token': token})}"


def build_reset_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?{urlencode({'token': token})}"


async def send_verification_email(to: str, token: str, name: Optional[str] = None) -> bool:
    link = build_verification_link(token)
    html = (
        f"<p>Hola {name or ''},</p>"
        f"<p>Gracias por registrarte en {settings.PROJECT_NAME}. Confirma tu correo aquí:</p>"
        f"<p><a href=\"{link}\">{link}</a></p>"
        f"<p>El enlace vence en {settings.VERIFY_TOKEN_EXPIRE_HOURS} horas; "
        f"si no lo usas, la cuenta se eliminará.</p>"
    )
    return await send_email(to, "Verifica tu correo electrónico", html)


async def send_password_reset_email(to: str, token: str) -> bool:
    link = build_reset_link(token)
    html = (
        "<p>Recibimos una solicitud para restablecer tu contraseña.</p>"
        f"<p><a href=\"{link}\">{link}</a></p>"
        f"<p>El enlace vence en {settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES} minutos. "
        "Si no fuiste tú, ignora este mensaje.</p>"
    )
    return await send_email(to, "Restablecer contraseña", html)
