from datetime import timedelta

import pytest
from jose import jwt

from conftest import make_user
from leaderboard_backend.core.config import settings
from leaderboard_backend.core.exceptions import AuthenticationException
from leaderboard_backend.core.security import SecurityUtils


def test_password_hashing():
    hashed = SecurityUtils.get_password_hash("P4ssword")

    assert hashed != "P4ssword"
    assert SecurityUtils.verify_password("P4ssword", hashed)
    assert not SecurityUtils.verify_password("p4ssword", hashed)


def test_verify_against_garbage_hash():
    assert not SecurityUtils.verify_password("P4ssword", "not-a-hash")


def test_token_round_trip(db):
    user = make_user(db, "Runner")

    claims = SecurityUtils.decode_token(SecurityUtils.create_access_token(user))

    assert claims["sub"] == str(user.id)
    assert claims["email"] == user.email
    assert claims["iss"] == settings.JWT_ISSUER
    assert claims["exp"] - claims["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def test_expired_token_rejected(db):
    user = make_user(db, "Runner")
    token = SecurityUtils.create_access_token(user, expires_delta=timedelta(minutes=-5))

    with pytest.raises(AuthenticationException):
        SecurityUtils.decode_token(token)


@pytest.mark.parametrize(
    "claims,key",
    [
        ({"sub": "x", "iss": "someone-else"}, settings.SECRET_KEY),
        ({"sub": "x", "iss": settings.JWT_ISSUER}, "wrong-key"),
    ],
)
def test_foreign_tokens_rejected(claims, key):
    token = jwt.encode(claims, key, algorithm=settings.ALGORITHM)

    with pytest.raises(AuthenticationException):
        SecurityUtils.decode_token(token)


def test_token_with_bad_subject(client):
    token = jwt.encode(
        {"sub": "not-a-uuid", "iss": settings.JWT_ISSUER}, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )

    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
