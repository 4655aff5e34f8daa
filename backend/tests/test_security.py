"""Pruebas de utilidades de seguridad"""
from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_one_time_token,
    get_password_hash,
    is_strong_password,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("Clave123*")

    assert hashed != "Clave123*"
    assert verify_password("Clave123*", hashed)
    assert not verify_password("clave123*", hashed)


def test_verify_against_malformed_hash():
    assert verify_password("Clave123*", "not-a-bcrypt-hash") is False


@pytest.mark.parametrize("password,expected", [
    ("Clave1*", True),
    ("ABC12?", True),
    ("clave1*", False),
    ("Clave**", False),
    ("Clave12", False),
    ("Cl1*", False),
    ("Clave 1*", False),
])
def test_password_policy(password, expected):
    assert is_strong_password(password) is expected


def test_access_token_claims():
    token = create_access_token(7, "ana@tecnicentro.pe", "ADMIN")

    payload = decode_token(token, ACCESS_TOKEN_TYPE)

    assert payload["sub"] == "7"
    assert payload["email"] == "ana@tecnicentro.pe"
    assert payload["role"] == "ADMIN"
    assert payload["type"] == ACCESS_TOKEN_TYPE
    assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def test_token_type_is_enforced():
    refresh = create_refresh_token(7, "ana@tecnicentro.pe", "USER")

    assert decode_token(refresh, REFRESH_TOKEN_TYPE)["type"] == REFRESH_TOKEN_TYPE
    with pytest.raises(TokenError):
        decode_token(refresh, ACCESS_TOKEN_TYPE)


def test_expired_token():
    token = create_access_token(7, "ana@tecnicentro.pe", "USER", expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenError) as excinfo:
        decode_token(token, ACCESS_TOKEN_TYPE)

    assert excinfo.value.expired is True


def test_foreign_signature():
    token = jwt.encode({"sub": "7", "type": ACCESS_TOKEN_TYPE}, "other-secret", algorithm="HS256")

    with pytest.raises(TokenError) as excinfo:
        decode_token(token, ACCESS_TOKEN_TYPE)

    assert excinfo.value.expired is False


def test_one_time_tokens_are_unique_hex():
    first, second = generate_one_time_token(), generate_one_time_token()

    assert first != second
    assert len(first) == 64
    int(first, 16)
