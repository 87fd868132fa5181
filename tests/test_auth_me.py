"""Тесты текущего пользователя (GET /api/auth/me)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt
import pytest

from ergotype.core.config import get_settings
from ergotype.core.security import create_access_token
from tests.helpers import login, make_client, signup


def _me_with_token(client, token: str):  # noqa: ANN001
    client.cookies.set("token", token)
    return client.get("/api/auth/me")


def test_me_after_login(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    created = signup(client, "me@example.com").json()["user"]
    login(client, "me@example.com")

    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["user"] == created


def test_me_without_cookie(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


def test_me_with_empty_cookie(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = _me_with_token(client, "")
    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


def _foreign_token(user_id: int, email: str) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {"id": user_id, "email": email, "iat": now, "exp": now + timedelta(hours=1)},
        "another-secret-key-with-at-least-32-characters",
        algorithm="HS256",
    )


@pytest.mark.parametrize(
    ("make_token", "message"),
    [
        (lambda user: _foreign_token(user["id"], user["email"]), "Invalid token"),
        (lambda user: "not.a.jwt", "Invalid token"),
        (lambda user: "garbage", "Invalid token"),
        (
            lambda user: create_access_token(
                user["id"],
                user["email"],
                expires_delta=timedelta(hours=-1),
            ),
            "Token expired",
        ),
    ],
    ids=["foreign-secret", "malformed-segments", "garbage", "expired"],
)
def test_me_rejects_bad_tokens(tmp_path: Path, make_token, message: str) -> None:  # noqa: ANN001
    client, _ = make_client(tmp_path)
    user = signup(client, "bad@example.com").json()["user"]

    response = _me_with_token(client, make_token(user))
    assert response.status_code == 401
    assert response.json() == {"error": message}


def test_me_rejects_token_without_identity_claims(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    settings_secret = get_settings().secret_key.get_secret_value()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"email": "x@example.com", "iat": now, "exp": now + timedelta(hours=1)},
        settings_secret,
        algorithm="HS256",
    )

    response = _me_with_token(client, token)
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_me_for_deleted_user(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = _me_with_token(client, create_access_token(999, "ghost@example.com"))
    assert response.status_code == 401
    assert response.json() == {"error": "User not found"}


def test_me_sets_rate_limit_headers(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)
    signup(client, "headers@example.com")
    login(client, "headers@example.com")

    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.headers["ratelimit-limit"] == "100"
    assert response.headers["ratelimit-remaining"] == "99"
