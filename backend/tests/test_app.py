"""Pruebas de rutas base e inicialización de la base de datos"""
from app.core.security import verify_password
from app.db.init_db import create_first_admin
from app.models.user import ROLE_ADMIN


def test_root_and_health(client):
    assert client.get("/").status_code == 200

    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["scheduler"]["running"] is False


def test_openapi_is_published(client):
    paths = client.get("/openapi.json").json()["paths"]

    assert "/auth/login" in paths
    assert "/orders" in paths
    assert "/orders/{order_id}" in paths
    assert "/orders/{order_id}/cancel" in paths
    assert "/orders/{order_id}/receipt.txt" in paths


def test_create_first_admin_is_idempotent(run_db):
    first = run_db(lambda db: create_first_admin(db, "jefe@tecnicentro.pe", "Admin123*"))
    second = run_db(lambda db: create_first_admin(db, "jefe@tecnicentro.pe", "Otra123*"))

    assert first.id == second.id
    assert first.role == ROLE_ADMIN
    assert first.verified is True
    assert verify_password("Admin123*", second.password)
