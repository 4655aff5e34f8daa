"""Pruebas de registro, login, tokens y contraseñas"""
from datetime import datetime, timedelta

from sqlalchemy import select

from app.core.security import create_refresh_token, verify_password
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from tests.conftest import ADMIN_PASSWORD, USER_PASSWORD, bearer


REGISTER_PAYLOAD = {
    "email": "duena@tecnicentro.pe",
    "password": "Clave123*",
    "name": "Dueña",
    "username": "duena",
}


def _get_user(run_db, email):
    async def _load(db):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()
    return run_db(_load)


class TestRegister:
    def test_register_creates_unverified_admin_and_sends_email(self, client, run_db, sent_emails):
        response = client.post("/auth/register", json=REGISTER_PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == REGISTER_PAYLOAD["email"]
        assert body["verified"] is False
        assert body["phone"] == "sin_telefono"
        assert "password" not in body

        user = _get_user(run_db, REGISTER_PAYLOAD["email"])
        assert user.role == ROLE_ADMIN
        assert user.verify_token
        assert user.verify_token_expires > datetime.utcnow() + timedelta(hours=23)
        assert user.timezone == "UTC"

        assert len(sent_emails) == 1
        assert sent_emails[0]["to"] == REGISTER_PAYLOAD["email"]
        assert user.verify_token in sent_emails[0]["html"]

    def test_language_comes_from_accept_language(self, client, run_db):
        client.post("/auth/register", json=REGISTER_PAYLOAD, headers={"Accept-Language": "en-US,en;q=0.9"})

        assert _get_user(run_db, REGISTER_PAYLOAD["email"]).language == "en"

    def test_duplicate_email_is_conflict(self, client, admin):
        payload = {**REGISTER_PAYLOAD, "email": admin["email"]}
        assert client.post("/auth/register", json=payload).status_code == 409

    def test_duplicate_username_is_conflict(self, client, admin):
        payload = {**REGISTER_PAYLOAD, "username": admin["username"]}
        assert client.post("/auth/register", json=payload).status_code == 409

    def test_undeliverable_email_is_bad_request(self, client, email_valid, sent_emails):
        email_valid["valid"] = False

        response = client.post("/auth/register", json=REGISTER_PAYLOAD)

        assert response.status_code == 400
        assert sent_emails == []

    def test_short_password_is_rejected(self, client):
        payload = {**REGISTER_PAYLOAD, "password": "abc"}
        assert client.post("/auth/register", json=payload).status_code == 422


class TestVerify:
    def test_verify_marks_user_and_redirects_to_login(self, client, run_db):
        client.post("/auth/register", json=REGISTER_PAYLOAD)
        token = _get_user(run_db, REGISTER_PAYLOAD["email"]).verify_token

        response = client.get("/auth/verify", params={"token": token}, follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "http://frontend.local/login?verified=true"
        user = _get_user(run_db, REGISTER_PAYLOAD["email"])
        assert user.verified is True
        assert user.verify_token is None

    def test_unknown_token_redirects_with_error(self, client):
        response = client.get("/auth/verify", params={"token": "nope"}, follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "http://frontend.local/verify-email?error=invalid_token"

    def test_expired_token_redirects_with_error(self, client, create_user):
        create_user(
            "tarde@tecnicentro.pe",
            verified=False,
            verify_token="expired-token",
            verify_token_expires=datetime.utcnow() - timedelta(minutes=1),
        )

        response = client.get("/auth/verify", params={"token": "expired-token"}, follow_redirects=False)

        assert response.headers["location"].endswith("/verify-email?error=invalid_token")


class TestLogin:
    def test_login_returns_tokens_and_records_ip(self, client, admin, run_db):
        response = client.post(
            "/auth/login",
            json={"email": admin["email"], "password": ADMIN_PASSWORD},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"] and body["refresh_token"]
        assert body["user"] == {
            "id": admin["id"],
            "email": admin["email"],
            "name": "Jefe",
            "role": ROLE_ADMIN,
            "verified": True,
        }

        user = _get_user(run_db, admin["email"])
        assert user.last_login_ip == "203.0.113.7"
        assert user.last_login_at is not None

    def test_wrong_password(self, client, admin):
        response = client.post("/auth/login", json={"email": admin["email"], "password": "Otra123*"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciales inválidas"

    def test_unknown_email(self, client):
        response = client.post("/auth/login", json={"email": "nadie@tecnicentro.pe", "password": "x"})
        assert response.status_code == 401

    def test_unverified_user_cannot_login(self, client, create_user):
        user = create_user("nuevo@tecnicentro.pe", verified=False)

        response = client.post("/auth/login", json={"email": user["email"], "password": USER_PASSWORD})

        assert response.status_code == 401

    def test_inactive_user_cannot_login(self, client, create_user):
        user = create_user("baja@tecnicentro.pe", status="INACTIVE")

        response = client.post("/auth/login", json={"email": user["email"], "password": USER_PASSWORD})

        assert response.status_code == 401

    def test_access_token_works_on_protected_route(self, client, admin):
        tokens = client.post("/auth/login", json={"email": admin["email"], "password": ADMIN_PASSWORD}).json()

        response = client.get("/users/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})

        assert response.status_code == 200
        assert response.json()["email"] == admin["email"]


class TestUsernameLogin:
    def test_staff_user_logs_in_with_username(self, client, seller):
        response = client.post(
            "/auth/login/username",
            json={"username": seller["username"], "password": USER_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["user"]["role"] == ROLE_USER

    def test_admin_cannot_use_username_login(self, client, admin):
        response = client.post(
            "/auth/login/username",
            json={"username": admin["username"], "password": ADMIN_PASSWORD},
        )

        assert response.status_code == 401

    def test_unverified_staff_user_can_still_log_in(self, client, create_user):
        user = create_user("sinverificar@tecnicentro.pe", verified=False)

        response = client.post(
            "/auth/login/username",
            json={"username": user["username"], "password": USER_PASSWORD},
        )

        assert response.status_code == 200


class TestRefresh:
    def test_refresh_returns_new_pair(self, client, admin):
        tokens = client.post("/auth/login", json={"email": admin["email"], "password": ADMIN_PASSWORD}).json()

        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"] != tokens["access_token"]
        assert body["refresh_token"] != tokens["refresh_token"]

    def test_access_token_is_not_a_refresh_token(self, client, admin):
        access = bearer(admin)["Authorization"].split(" ", 1)[1]

        assert client.post("/auth/refresh", json={"refresh_token": access}).status_code == 401

    def test_refresh_token_is_not_a_bearer_credential(self, client, admin):
        refresh = create_refresh_token(admin["id"], admin["email"], admin["role"])

        response = client.get("/users/me", headers={"Authorization": f"Bearer {refresh}"})

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_expired_refresh_token(self, client, admin):
        refresh = create_refresh_token(admin["id"], admin["email"], admin["role"], expires_delta=timedelta(seconds=-1))

        assert client.post("/auth/refresh", json={"refresh_token": refresh}).status_code == 401

    def test_garbage_token(self, client):
        assert client.post("/auth/refresh", json={"refresh_token": "not-a-jwt"}).status_code == 401

    def test_refresh_for_deleted_user(self, client):
        refresh = create_refresh_token(999, "fantasma@tecnicentro.pe", ROLE_USER)

        assert client.post("/auth/refresh", json={"refresh_token": refresh}).status_code == 401


class TestChangePassword:
    def test_change_password(self, client, seller, seller_headers, run_db):
        response = client.patch(
            "/auth/change-password",
            json={"current_password": USER_PASSWORD, "new_password": "Nueva123*"},
            headers=seller_headers,
        )

        assert response.status_code == 200
        user = _get_user(run_db, seller["email"])
        assert verify_password("Nueva123*", user.password)
        assert user.password_changed_at is not None

    def test_wrong_current_password_is_forbidden(self, client, seller_headers):
        response = client.patch(
            "/auth/change-password",
            json={"current_password": "Mala123*", "new_password": "Nueva123*"},
            headers=seller_headers,
        )
        assert response.status_code == 403

    def test_same_password_is_rejected(self, client, seller_headers):
        response = client.patch(
            "/auth/change-password",
            json={"current_password": USER_PASSWORD, "new_password": USER_PASSWORD},
            headers=seller_headers,
        )
        assert response.status_code == 400

    def test_weak_password_is_rejected(self, client, seller_headers):
        response = client.patch(
            "/auth/change-password",
            json={"current_password": USER_PASSWORD, "new_password": "simple1"},
            headers=seller_headers,
        )
        assert response.status_code == 400

    def test_short_password_fails_policy(self, client, seller_headers):
        response = client.patch(
            "/auth/change-password",
            json={"current_password": USER_PASSWORD, "new_password": "A1*"},
            headers=seller_headers,
        )
        assert response.status_code == 400

    def test_requires_bearer(self, client):
        response = client.patch(
            "/auth/change-password",
            json={"current_password": USER_PASSWORD, "new_password": "Nueva123*"},
        )
        assert response.status_code == 401


class TestPasswordReset:
    def test_request_for_unknown_email_gives_same_message(self, client, admin, sent_emails):
        known = client.post("/auth/request-password-reset", json={"email": admin["email"]})
        unknown = client.post("/auth/request-password-reset", json={"email": "nadie@tecnicentro.pe"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert [m["to"] for m in sent_emails] == [admin["email"]]

    def test_reset_flow(self, client, admin, run_db):
        client.post("/auth/request-password-reset", json={"email": admin["email"]})
        user = _get_user(run_db, admin["email"])
        assert user.password_reset_token_expires <= datetime.utcnow() + timedelta(minutes=30)

        response = client.patch(
            "/auth/reset-password",
            json={"token": user.password_reset_token, "new_password": "Cambio123*"},
        )

        assert response.status_code == 200
        user = _get_user(run_db, admin["email"])
        assert user.password_reset_token is None
        assert user.password_changed_at is not None
        login = client.post("/auth/login", json={"email": admin["email"], "password": "Cambio123*"})
        assert login.status_code == 200

    def test_invalid_token(self, client):
        response = client.patch(
            "/auth/reset-password",
            json={"token": "desconocido", "new_password": "Cambio123*"},
        )
        assert response.status_code == 400

    def test_expired_token(self, client, create_user):
        create_user(
            "olvido@tecnicentro.pe",
            password_reset_token="old-reset",
            password_reset_token_expires=datetime.utcnow() - timedelta(minutes=1),
        )

        response = client.patch(
            "/auth/reset-password",
            json={"token": "old-reset", "new_password": "Cambio123*"},
        )
        assert response.status_code == 400
