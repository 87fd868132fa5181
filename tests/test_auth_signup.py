"""Тесты регистрации (POST /api/auth/signup)."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from ergotype.models.user import User
from ergotype.services.auth import SIGNUP_MESSAGE, shape_signup_response
from ergotype.services.users import get_user_by_email
from tests.helpers import count_users, make_client, run, signup


def test_signup_happy_path(tmp_path: Path) -> None:
    client, session_local = make_client(tmp_path)

    response = signup(client, "user@example.com")
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == SIGNUP_MESSAGE
    user = body["user"]
    assert isinstance(user["id"], int)
    assert user["email"] == "user@example.com"
    assert set(user) == {"id", "email", "createdAt", "updatedAt"}
    assert count_users(session_local, "user@example.com") == 1


def test_signup_stores_hash_not_plaintext(tmp_path: Path) -> None:
    client, session_local = make_client(tmp_path)
    assert signup(client, "hash@example.com").status_code == 201

    async def _load() -> User:
        async with session_local() as db:
            return await get_user_by_email(db, "hash@example.com")

    user = run(_load())
    assert user.password_hash
    assert user.password_hash != "Password1!"
    assert user.password_hash.startswith("pbkdf2_sha256$")


def test_signup_duplicate_email_is_indistinguishable(tmp_path: Path) -> None:
    client, session_local = make_client(tmp_path)

    first = signup(client, "dup@example.com")
    second = signup(client, "dup@example.com", password="Another1!")

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json() == {"message": SIGNUP_MESSAGE}
    assert first.json()["message"] == second.json()["message"]
    assert count_users(session_local, "dup@example.com") == 1


def test_signup_duplicate_does_not_rehash_or_overwrite(tmp_path: Path, monkeypatch) -> None:
    client, _ = make_client(tmp_path)
    assert signup(client, "keep@example.com").status_code == 201

    def boom(*args, **kwargs):  # noqa: ANN001,ARG001
        raise AssertionError("password must not be hashed for an existing email")

    monkeypatch.setattr("ergotype.services.auth.hash_password", boom)
    assert signup(client, "keep@example.com", password="Changed1!").status_code == 201

    response = client.post(
        "/api/auth/login",
        json={"email": "keep@example.com", "password": "Password1!"},
    )
    assert response.status_code == 200


def test_signup_race_conflict_is_absorbed(tmp_path: Path, monkeypatch) -> None:
    """Проигравшая гонку регистрация отвечает 201, вторая запись не создаётся."""

    client, session_local = make_client(tmp_path)
    assert signup(client, "race@example.com").status_code == 201

    async def never_found(db, email):  # noqa: ANN001,ARG001
        return None

    monkeypatch.setattr("ergotype.services.auth.get_user_by_email", never_found)

    response = signup(client, "race@example.com")
    assert response.status_code == 201
    assert response.json() == {"message": SIGNUP_MESSAGE}
    assert count_users(session_local, "race@example.com") == 1


def test_signup_email_is_case_sensitive(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    first = signup(client, "Case@example.com")
    second = signup(client, "case@example.com")
    assert "user" in first.json()
    assert "user" in second.json()
    assert first.json()["user"]["id"] != second.json()["user"]["id"]


@pytest.mark.parametrize(
    ("password", "message"),
    [
        ("password", "Password must contain at least 1 number"),
        ("Password1", "Password must contain at least 1 symbol"),
        ("password1!", "Password must contain at least 1 capital letter"),
        ("Pa1!abc", "Password must be at least 8 characters long"),
    ],
)
def test_signup_password_policy(tmp_path: Path, password: str, message: str) -> None:
    client, session_local = make_client(tmp_path)

    response = signup(client, "policy@example.com", password=password)
    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation error",
        "fields": {"password": message},
    }
    assert count_users(session_local, "policy@example.com") == 0


def test_signup_accepts_minimal_strong_password(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = signup(client, "strong@example.com", password="Passw0r!")
    assert response.status_code == 201


def test_signup_invalid_email_and_password_listed_together(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = signup(client, "not-an-email", password="short")
    assert response.status_code == 400
    fields = response.json()["fields"]
    assert fields["email"] == "Please enter a valid email address"
    assert fields["password"] == "Password must be at least 8 characters long"


def test_signup_missing_fields(tmp_path: Path) -> None:
    client, _ = make_client(tmp_path)

    response = client.post("/api/auth/signup", json={})
    assert response.status_code == 400
    assert response.json()["fields"] == {
        "email": "Email is required",
        "password": "Password is required",
    }


def test_shape_signup_response_without_created_user() -> None:
    status_code, body = shape_signup_response(None)
    assert status_code == 201
    assert body.model_dump(exclude_none=True) == {"message": SIGNUP_MESSAGE}


def test_shape_signup_response_never_exposes_hash() -> None:
    now = datetime.now(timezone.utc)
    user = User(
        id=7,
        email="u@example.com",
        password_hash="pbkdf2_sha256$1000$abc$def",
        created_at=now,
        updated_at=now,
    )

    status_code, body = shape_signup_response(user)
    dumped = body.model_dump(by_alias=True, exclude_none=True)
    assert status_code == 201
    assert dumped["user"]["id"] == 7
    assert set(dumped["user"]) == {"id", "email", "createdAt", "updatedAt"}


def test_signup_rejects_password_with_lone_surrogate(tmp_path: Path) -> None:
    client, session_local = make_client(tmp_path)

    response = client.post(
        "/api/auth/signup",
        content=b'{"email": "surrogate@example.com", "password": "Password1!\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["fields"] == {
        "password": "Password contains invalid characters",
    }
    assert count_users(session_local, "surrogate@example.com") == 0
