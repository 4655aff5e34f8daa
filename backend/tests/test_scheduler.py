"""Pruebas de la limpieza de cuentas sin verificar y del planificador"""
from datetime import datetime, timedelta

from sqlalchemy import select

from app.models.user import User
from app.services import scheduler
from app.services.auth_service import purge_unverified_users


def _emails(run_db):
    async def _load(db):
        return set((await db.execute(select(User.email))).scalars().all())
    return run_db(_load)


def test_purge_removes_only_expired_unverified_accounts(create_user, run_db):
    past = datetime.utcnow() - timedelta(hours=1)
    future = datetime.utcnow() + timedelta(hours=1)
    create_user("vencido@tecnicentro.pe", verified=False, verify_token="a", verify_token_expires=past)
    create_user("pendiente@tecnicentro.pe", verified=False, verify_token="b", verify_token_expires=future)
    create_user("verificado@tecnicentro.pe", verified=True)

    removed = run_db(purge_unverified_users)

    assert removed == 1
    assert _emails(run_db) == {"pendiente@tecnicentro.pe", "verificado@tecnicentro.pe"}


def test_purge_with_explicit_clock(create_user, run_db):
    expires = datetime.utcnow() + timedelta(hours=24)
    create_user("nuevo@tecnicentro.pe", verified=False, verify_token="c", verify_token_expires=expires)

    async def purge_tomorrow(db):
        return await purge_unverified_users(db, now=expires + timedelta(seconds=1))

    assert run_db(purge_tomorrow) == 1
    assert _emails(run_db) == set()


def test_scheduler_disabled_by_configuration(monkeypatch):
    monkeypatch.setattr(scheduler.settings, "USER_CLEANUP_ENABLED", False)

    scheduler.init_scheduler()

    assert scheduler.get_scheduler_status() == {"enabled": False, "running": False, "jobs": []}
