"""
Fixtures compartidas para las pruebas del backend

Cada prueba usa su propia base SQLite en un directorio temporal; el envío de
correos y la consulta DNS de dominios se reemplazan con monkeypatch.
"""
import asyncio
import os
import tempfile

# Configuración antes de importar la aplicación
_TEST_DIR = tempfile.mkdtemp(prefix="tecnicentro-tests-")
os.environ["SQLITE_DATABASE_URI"] = f"sqlite:///{_TEST_DIR}/default.db"
os.environ["LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["USER_CLEANUP_ENABLED"] = "false"
os.environ["EMAIL_CHECK_DELIVERABILITY"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["FRONTEND_URL"] = "http://frontend.local"
os.environ.pop("MAIL_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app.core.deps import get_db
from app.core.security import create_access_token, get_password_hash
from app.db.init_db import ensure_tables_exist
from app.main import app
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.services import auth_service, mailer

ADMIN_PASSWORD = "Admin123*"
USER_PASSWORD = "Vende123*"


@pytest.fixture
def session_factory(tmp_path):
    """
    Sesiones sobre una base nueva por prueba

    NullPool: TestClient y asyncio.run usan bucles distintos y no deben compartir conexiones
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", poolclass=NullPool)
    asyncio.run(ensure_tables_exist(engine))
    factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield factory
    asyncio.run(engine.dispose())


@pytest.fixture
def run_db(session_factory):
    """Ejecuta una corrutina fn(db) con una sesión de prueba y devuelve su resultado"""
    def runner(fn):
        async def _run():
            async with session_factory() as db:
                return await fn(db)
        return asyncio.run(_run())
    return runner


@pytest.fixture
def sent_emails(monkeypatch):
    """Correos que la aplicación intentó enviar"""
    outbox = []

    async def fake_send_email(to, subject, html):
        outbox.append({"to": to, "subject": subject, "html": html})
        return True

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
    return outbox


@pytest.fixture
def email_valid(monkeypatch):
    """Resultado de la validación de dominio; por defecto todos los correos son válidos"""
    state = {"valid": True}

    async def fake_is_email_valid(email):
        return state["valid"]

    monkeypatch.setattr(auth_service, "is_email_valid", fake_is_email_valid)
    return state


@pytest.fixture
def client(session_factory, sent_emails, email_valid):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(run_db):
    """Crea un usuario directamente en la base y devuelve un dict con sus datos"""
    def factory(
        email,
        password=USER_PASSWORD,
        role=ROLE_USER,
        username=None,
        name="Usuario Prueba",
        verified=True,
        **fields,
    ):
        async def _create(db):
            user = User(
                email=email,
                username=username or email.split("@")[0],
                password=get_password_hash(password),
                name=name,
                role=role,
                verified=verified,
                **fields,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return {"id": user.id, "email": user.email, "username": user.username, "role": user.role}
        return run_db(_create)
    return factory


def bearer(user: dict) -> dict:
    token = create_access_token(user["id"], user["email"], user["role"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(create_user):
    return create_user("admin@tecnicentro.pe", password=ADMIN_PASSWORD, role=ROLE_ADMIN, name="Jefe")


@pytest.fixture
def seller(create_user):
    return create_user("vendedor@tecnicentro.pe", name="Vendedor Uno")


@pytest.fixture
def other_seller(create_user):
    return create_user("vendedor2@tecnicentro.pe", name="Vendedor Dos")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def seller_headers(seller):
    return bearer(seller)


@pytest.fixture
def product_factory(client, admin_headers):
    """Crea productos a través de la API"""
    def factory(name="Pantalla LCD", price=120.0, stock=10, **fields):
        response = client.post(
            "/products",
            json={"name": name, "price": price, "stock": stock, **fields},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return factory
